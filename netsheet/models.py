from __future__ import annotations

from datetime import date
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class PremiumTierRow(_Frozen):
    low: float
    high: float
    band_low: float
    band_high: float

    @model_validator(mode="after")
    def _check_band(self):
        if self.high < self.low:
            raise ValueError(f"tier row {self.low}-{self.high} is inverted")
        if self.band_high < self.band_low:
            raise ValueError(f"premium band {self.band_low}-{self.band_high} is inverted")
        return self


class PremiumQuote(_Frozen):
    min: float
    max: float
    chosen: float
    mode: Literal["table", "overflow"]


class FeeSchedule(_Frozen):
    """Seller-side title fee constants for one office's rate sheet.

    ``settlement_split`` marks schedules whose settlement constants are the
    full fee shared by buyer and seller; the seller line is half of it.
    """

    name: str
    settlement_with_loan: float = Field(ge=0)
    settlement_cash: float = Field(ge=0)
    settlement_split: bool = True
    title_processing: float = Field(ge=0)
    closing_processing: float = Field(ge=0)
    cpl: float = Field(ge=0)
    tieff: float = Field(ge=0)
    deed_recording_primary: float = Field(ge=0)
    deed_recording_other: float = Field(ge=0)
    efile_per_doc: float = Field(ge=0)
    transfer_plus_sdf: float = Field(ge=0)
    effective: Optional[date] = None


class TitleFeeSettings(_Frozen):
    transaction_type: Literal["with_loan", "cash"] = "with_loan"
    county: str = "Marion"
    use_simplifile: bool = True
    owner_policy_premium: float = 0.0
    include_settlement_fee: bool = True
    include_cpl: bool = True
    include_tieff: bool = True
    include_deed_recording: bool = False
    include_transfer_fee_sdf: bool = False


class LineItem(_Frozen):
    label: str
    amount: float


class TitleFeeBreakdown(_Frozen):
    schedule: str
    items: Tuple[LineItem, ...] = ()
    total: float = 0.0


class Installment(_Frozen):
    paid: bool = False
    amount: float = 0.0


class TaxSettings(_Frozen):
    prior_year_tax: float = 0.0
    spring: Installment = Installment()
    fall: Installment = Installment()
    prorate_through: Literal["day_before", "closing_date"] = "day_before"
    force_365: bool = False


class TaxBreakdown(_Frozen):
    proration_end: date
    days_in_year: int
    prior_year_tax: float
    daily_rate: float
    days_accrued: int
    accrued_this_year: float
    paid_total: float
    unpaid_prior_year: float
    total_debit: float


class CommissionLine(_Frozen):
    label: str
    basis: Literal["pct", "flat"] = "pct"
    rate: str = "3"
    flat: str = "0"


class OtherCost(_Frozen):
    label: str = "Other"
    amount: str = "0"


def _default_commissions() -> Tuple[CommissionLine, ...]:
    return (
        CommissionLine(label="Listing agent commission"),
        CommissionLine(label="Buyer’s agent commission"),
    )


class NetSheetInputs(_Frozen):
    """Everything the form holds, as typed. Money fields stay free text."""

    sale_price: str = "330,000"
    closing_date: str = ""
    county: str = "Marion"
    commissions: Tuple[CommissionLine, ...] = Field(default_factory=_default_commissions)
    mortgage_payoff: str = "0"
    seller_concessions: str = "0"
    other_costs: Tuple[OtherCost, ...] = (OtherCost(label="Home warranty"),)

    transaction_type: Literal["with_loan", "cash"] = "with_loan"
    use_simplifile: bool = True
    auto_owner_policy: bool = True
    owner_policy_choice: Literal["low", "mid", "high"] = "mid"
    owner_policy_premium: str = "0"
    include_settlement_fee: bool = True
    include_cpl: bool = True
    include_tieff: bool = True
    include_deed_recording: bool = False
    include_transfer_fee_sdf: bool = False

    prior_year_tax: str = "3,200"
    spring_paid: bool = False
    spring_paid_amount: str = "1,600"
    fall_paid: bool = False
    fall_paid_amount: str = "1,600"
    prorate_through: Literal["day_before", "closing_date"] = "day_before"
    force_365: bool = False


class NetSheetResult(_Frozen):
    sale_price: float
    closing_date: date
    county: str
    primary_recording_tier: bool
    commissions: Tuple[LineItem, ...]
    total_commission: float
    mortgage_payoff: float
    seller_concessions: float
    other_costs: Tuple[LineItem, ...]
    other_costs_total: float
    owner_policy: PremiumQuote
    title_fees: TitleFeeBreakdown
    tax: TaxBreakdown
    tax_debit: float
    net: float

    @property
    def schedule_name(self) -> str:
        return self.title_fees.schedule
