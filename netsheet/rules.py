from __future__ import annotations
from datetime import date
from typing import Literal, List, Dict, Any
from pydantic import BaseModel, Field

from netsheet.models import NetSheetResult
from netsheet.presets import OVERFLOW_CEILING


class RuleResult(BaseModel):
    code: str
    severity: Literal["info", "warn", "critical"]
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


def evaluate_rules(result: NetSheetResult) -> List[RuleResult]:
    res: List[RuleResult] = []

    if result.sale_price <= 0:
        res.append(
            RuleResult(
                code="NO_SALE_PRICE",
                severity="critical",
                message="No sale price entered; the net sheet is not meaningful.",
            )
        )

    if result.net < 0:
        res.append(
            RuleResult(
                code="NEGATIVE_NET",
                severity="warn",
                message="Seller will need to bring funds to closing.",
                context={"net": result.net},
            )
        )

    if result.owner_policy.mode == "overflow":
        res.append(
            RuleResult(
                code="PREMIUM_OVERFLOW",
                severity="info",
                message="Sale price is above the premium chart; owner’s policy uses the per-$10,000 formula.",
                context={"ceiling": OVERFLOW_CEILING, "premium": result.owner_policy.chosen},
            )
        )

    jan1 = date(result.closing_date.year, 1, 1)
    if result.tax.proration_end < jan1:
        res.append(
            RuleResult(
                code="CUTOFF_BEFORE_YEAR_START",
                severity="info",
                message="Proration ends before January 1; no current-year taxes accrue.",
                context={"proration_end": result.tax.proration_end.isoformat()},
            )
        )

    if result.tax.paid_total > result.tax.prior_year_tax:
        res.append(
            RuleResult(
                code="PAID_EXCEEDS_PRIOR_YEAR",
                severity="info",
                message="Paid installments exceed the prior-year tax bill.",
                context={"paid_total": result.tax.paid_total, "prior_year_tax": result.tax.prior_year_tax},
            )
        )

    if result.title_fees.schedule != "Standard":
        res.append(
            RuleResult(
                code="SCHEDULE_OVERRIDE",
                severity="info",
                message=f"{result.county} County closes on the {result.title_fees.schedule} fee schedule.",
                context={"county": result.county, "schedule": result.title_fees.schedule},
            )
        )

    return res


def has_blocking(res: List[RuleResult]) -> bool:
    return any(r.severity == "critical" for r in res)
