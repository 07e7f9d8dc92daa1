from __future__ import annotations

import logging
import math
import re
from bisect import bisect_left
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from netsheet.models import (
    CommissionLine,
    FeeSchedule,
    Installment,
    LineItem,
    NetSheetInputs,
    NetSheetResult,
    PremiumQuote,
    PremiumTierRow,
    TaxBreakdown,
    TaxSettings,
    TitleFeeBreakdown,
    TitleFeeSettings,
)
from netsheet.presets import (
    FEE_SCHEDULES,
    OVERFLOW_RATE,
    OVERFLOW_UNIT,
    OWNER_POLICY_TABLE,
    PRIMARY_RECORDING_COUNTY,
    SCHEDULE_OVERRIDES,
    STANDARD_SCHEDULE,
)
from netsheet.utils import parse_closing_date

logger = logging.getLogger(__name__)

_MONEY_NOISE = re.compile(r"[$,\s]")
_PERCENT_NOISE = re.compile(r"[%\s]")
_NUMBER = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
CENT = Decimal("0.01")


def nz(x, default=0.0):
    """Return a float for ``x`` or a fallback value.

    Form fields arrive as ``None``, blank strings or ``NaN`` when the user has
    not typed anything yet.  This mirrors the spreadsheet ``NZ()`` function so
    later math never has to special-case a missing value.
    """

    try:
        if x is None or (isinstance(x, float) and math.isnan(x)):
            return default
        return float(x)
    except (TypeError, ValueError):
        return default


def _parse_number(value, noise: re.Pattern) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        n = float(value)
    else:
        cleaned = noise.sub("", "" if value is None else str(value))
        if not _NUMBER.fullmatch(cleaned):
            return 0.0
        n = float(cleaned)
    if not math.isfinite(n) or n < 0:
        return 0.0
    return n


def parse_money(value) -> float:
    """Parse free-text currency such as ``"$330,000"`` into a float.

    Dollar signs, thousands separators and whitespace are ignored.  Anything
    else that is not a plain decimal number (including negatives, ``inf`` and
    ``nan``) comes back as ``0.0``; this never raises.
    """

    return _parse_number(value, _MONEY_NOISE)


def parse_percent(value) -> float:
    """Parse a percentage such as ``"3"`` or ``"2.5 %"`` into a float."""

    return _parse_number(value, _PERCENT_NOISE)


def round2(value) -> float:
    """Round to cents, halves away from zero (never banker's rounding)."""

    v = nz(value)
    if not math.isfinite(v):
        return 0.0
    return float(Decimal(repr(v)).quantize(CENT, rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Owner's policy premium
# ---------------------------------------------------------------------------


def _tier_row(amount: float, table: Sequence[PremiumTierRow]) -> PremiumTierRow:
    highs = [r.high for r in table]
    return table[min(bisect_left(highs, amount), len(table) - 1)]


def owners_policy_premium(
    liability_amount,
    choice: str = "mid",
    table: Sequence[PremiumTierRow] = OWNER_POLICY_TABLE,
) -> PremiumQuote:
    """Look up the owner's policy premium for a liability amount.

    Inside the chart the quote carries the row's band; ``choice`` picks the
    low edge, high edge or the midpoint rounded to cents.  Above the top
    row of ``table`` the premium is a step function starting from that row's
    ``band_high``: every started ``OVERFLOW_UNIT`` over it adds
    ``OVERFLOW_RATE``.

    Rows are matched on their upper bound, so an amount such as ``50000.50``
    falls in the row that starts at ``50001``.
    """

    amt = max(nz(liability_amount), 0.0)

    top = table[-1]
    if amt > top.high:
        units = math.ceil((amt - top.high) / OVERFLOW_UNIT)
        premium = top.band_high + OVERFLOW_RATE * units
        logger.debug("owner's policy above chart: %s units over ceiling", units)
        return PremiumQuote(min=premium, max=premium, chosen=premium, mode="overflow")

    row = _tier_row(amt, table)
    if choice == "low":
        chosen = row.band_low
    elif choice == "high":
        chosen = row.band_high
    else:
        chosen = (row.band_low + row.band_high) / 2
    return PremiumQuote(min=row.band_low, max=row.band_high, chosen=round2(chosen), mode="table")


# ---------------------------------------------------------------------------
# Title fees
# ---------------------------------------------------------------------------


def _county_key(county) -> str:
    return str(county or "").strip().lower()


def fee_schedule_for_county(county) -> FeeSchedule:
    """Resolve the fee schedule for a county, defaulting to the standard sheet."""

    name = SCHEDULE_OVERRIDES.get(_county_key(county))
    if name is None:
        return STANDARD_SCHEDULE
    logger.debug("county %r uses the %s fee schedule", county, name)
    return FEE_SCHEDULES[name]


def is_primary_recording_county(county) -> bool:
    return _county_key(county) == PRIMARY_RECORDING_COUNTY.lower()


def settlement_fee(schedule: FeeSchedule, transaction_type: str) -> float:
    """Seller's share of the settlement fee for the transaction type."""

    full = schedule.settlement_with_loan if transaction_type == "with_loan" else schedule.settlement_cash
    if schedule.settlement_split:
        return round2(full / 2)
    return full


def seller_title_fees(
    settings: TitleFeeSettings, schedule: Optional[FeeSchedule] = None
) -> TitleFeeBreakdown:
    """Itemize the seller's title charges in settlement-statement order.

    The order of ``items`` is what the summary, the PDF and any other export
    print, so new lines must be appended in the same sequence.
    """

    if schedule is None:
        schedule = fee_schedule_for_county(settings.county)
    items: List[Tuple[str, float]] = []

    if settings.owner_policy_premium > 0:
        items.append(("Owner’s title policy (estimate)", settings.owner_policy_premium))

    if settings.include_settlement_fee:
        items.append(
            ("Settlement / closing fee (seller)", settlement_fee(schedule, settings.transaction_type))
        )

    items.append(("Title processing fee (seller)", schedule.title_processing))
    items.append(("Closing processing fee (seller)", schedule.closing_processing))

    if settings.include_cpl:
        items.append(("CPL (seller)", schedule.cpl))
    if settings.include_tieff:
        items.append(("TIEFF (seller)", schedule.tieff))

    if settings.include_deed_recording:
        if is_primary_recording_county(settings.county):
            deed = schedule.deed_recording_primary
        else:
            deed = schedule.deed_recording_other
        items.append(("Recording fee: deed", deed))
        if settings.use_simplifile:
            items.append(("Simplifile submission (deed)", schedule.efile_per_doc))

    if settings.include_transfer_fee_sdf:
        items.append(("County transfer fee + SDF", schedule.transfer_plus_sdf))

    total = round2(sum(nz(amount) for _, amount in items))
    return TitleFeeBreakdown(
        schedule=schedule.name,
        items=tuple(LineItem(label=label, amount=round2(amount)) for label, amount in items),
        total=total,
    )


# ---------------------------------------------------------------------------
# Property tax proration (Indiana, paid in arrears)
# ---------------------------------------------------------------------------


def is_leap_year(year: int) -> bool:
    return year % 400 == 0 or (year % 4 == 0 and year % 100 != 0)


def days_between_inclusive(start: date, end: date) -> int:
    """Count calendar days from ``start`` through ``end``; both ends count."""

    if end < start:
        return 0
    return (end - start).days + 1


def _paid_amount(inst: Installment) -> float:
    return max(nz(inst.amount), 0.0) if inst.paid else 0.0


def arrears_tax_proration(closing: date, tax: TaxSettings) -> TaxBreakdown:
    """Seller's property tax debit at closing.

    Indiana bills a year's tax in the following year (spring and fall
    installments).  At closing the seller owes whatever of last year's bill is
    still unpaid plus this year's accrual from January 1 through the cutoff
    day, at ``prior_year_tax / days_in_year`` per day.
    """

    year = closing.year
    jan1 = date(year, 1, 1)
    proration_end = closing - timedelta(days=1) if tax.prorate_through == "day_before" else closing

    days_in_year = 365 if tax.force_365 else (366 if is_leap_year(year) else 365)
    prior = max(nz(tax.prior_year_tax), 0.0)
    daily_rate = prior / days_in_year

    days_accrued = 0 if proration_end < jan1 else days_between_inclusive(jan1, proration_end)
    accrued = daily_rate * days_accrued

    paid_total = _paid_amount(tax.spring) + _paid_amount(tax.fall)
    unpaid_prior_year = max(prior - paid_total, 0.0)

    return TaxBreakdown(
        proration_end=proration_end,
        days_in_year=days_in_year,
        prior_year_tax=prior,
        daily_rate=daily_rate,
        days_accrued=days_accrued,
        accrued_this_year=accrued,
        paid_total=paid_total,
        unpaid_prior_year=unpaid_prior_year,
        total_debit=unpaid_prior_year + accrued,
    )


# ---------------------------------------------------------------------------
# Net sheet
# ---------------------------------------------------------------------------


def commission_amount(line: CommissionLine, sale_price: float) -> float:
    """Commission for one agent, either a percent of the sale price or flat."""

    if line.basis == "pct":
        return nz(sale_price) * parse_percent(line.rate) / 100
    return parse_money(line.flat)


def seller_net(
    sale_price: float,
    commissions: Iterable[float],
    mortgage_payoff: float,
    seller_concessions: float,
    other_costs: Iterable[float],
    title_fees_total: float,
    tax_total_debit: float,
) -> float:
    """Estimated net to seller, rounded once to cents.

    The result is not floored; a negative figure means the seller brings
    money to closing.
    """

    net = (
        nz(sale_price)
        - sum(nz(c) for c in commissions)
        - nz(mortgage_payoff)
        - nz(seller_concessions)
        - sum(nz(c) for c in other_costs)
        - nz(title_fees_total)
        - nz(tax_total_debit)
    )
    return round2(net)


def tax_settings_from_inputs(inputs: NetSheetInputs) -> TaxSettings:
    """Build tax settings from the form, defaulting blank installments to half."""

    prior = parse_money(inputs.prior_year_tax)
    half = max(prior / 2, 0.0)
    return TaxSettings(
        prior_year_tax=prior,
        spring=Installment(paid=inputs.spring_paid, amount=parse_money(inputs.spring_paid_amount) or half),
        fall=Installment(paid=inputs.fall_paid, amount=parse_money(inputs.fall_paid_amount) or half),
        prorate_through=inputs.prorate_through,
        force_365=inputs.force_365,
    )


def compute_net_sheet(inputs: NetSheetInputs, today: Optional[date] = None) -> NetSheetResult:
    """Run the whole net sheet for one snapshot of form inputs.

    Pure apart from ``today``, which is only consulted when the closing date
    text is blank or invalid.
    """

    sale_price = parse_money(inputs.sale_price)
    closing = parse_closing_date(inputs.closing_date, today=today)

    commissions = [(c.label, commission_amount(c, sale_price)) for c in inputs.commissions]
    others = [(c.label, parse_money(c.amount)) for c in inputs.other_costs]
    payoff = parse_money(inputs.mortgage_payoff)
    concessions = parse_money(inputs.seller_concessions)

    quote = owners_policy_premium(sale_price, inputs.owner_policy_choice)
    premium = quote.chosen if inputs.auto_owner_policy else parse_money(inputs.owner_policy_premium)

    fees = seller_title_fees(
        TitleFeeSettings(
            transaction_type=inputs.transaction_type,
            county=inputs.county,
            use_simplifile=inputs.use_simplifile,
            owner_policy_premium=premium,
            include_settlement_fee=inputs.include_settlement_fee,
            include_cpl=inputs.include_cpl,
            include_tieff=inputs.include_tieff,
            include_deed_recording=inputs.include_deed_recording,
            include_transfer_fee_sdf=inputs.include_transfer_fee_sdf,
        )
    )

    tax = arrears_tax_proration(closing, tax_settings_from_inputs(inputs))
    tax_debit = round2(tax.total_debit)

    net = seller_net(
        sale_price,
        [amt for _, amt in commissions],
        payoff,
        concessions,
        [amt for _, amt in others],
        fees.total,
        tax_debit,
    )

    return NetSheetResult(
        sale_price=sale_price,
        closing_date=closing,
        county=inputs.county,
        primary_recording_tier=is_primary_recording_county(inputs.county),
        commissions=tuple(LineItem(label=label, amount=round2(amt)) for label, amt in commissions),
        total_commission=round2(sum(amt for _, amt in commissions)),
        mortgage_payoff=payoff,
        seller_concessions=concessions,
        other_costs=tuple(LineItem(label=label, amount=round2(amt)) for label, amt in others),
        other_costs_total=round2(sum(amt for _, amt in others)),
        owner_policy=quote,
        title_fees=fees,
        tax=tax,
        tax_debit=tax_debit,
        net=net,
    )


def summary_rows(result: NetSheetResult) -> List[Tuple[str, float, str]]:
    """Deal summary as ``(label, amount, kind)`` in print order.

    ``kind`` is ``"credit"``, ``"debit"``, ``"subtotal"`` (informational, not
    part of the arithmetic) or ``"net"``.
    """

    rows: List[Tuple[str, float, str]] = [("Sale price", round2(result.sale_price), "credit")]
    rows += [(c.label, c.amount, "debit") for c in result.commissions]
    if len(result.commissions) > 1:
        rows.append(("Total commission", result.total_commission, "subtotal"))
    rows += [
        ("Mortgage payoff", round2(result.mortgage_payoff), "debit"),
        ("Seller concessions", round2(result.seller_concessions), "debit"),
        ("Other seller-paid costs", result.other_costs_total, "debit"),
        ("Title fees (seller)", result.title_fees.total, "debit"),
        ("Estimated property tax proration (IN arrears)", result.tax_debit, "debit"),
        ("Estimated net to seller", result.net, "net"),
    ]
    return rows


def line_items_frame(result: NetSheetResult) -> pd.DataFrame:
    """Deal summary rows as a table for display."""

    return pd.DataFrame(summary_rows(result), columns=["Item", "Amount", "Kind"])
