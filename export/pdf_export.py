"""Seller net sheet PDF export."""
from __future__ import annotations

import io
import logging
from typing import Any, Dict, Iterable, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from netsheet.calculators import round2, summary_rows
from netsheet.config import get_settings
from netsheet.models import NetSheetResult
from netsheet.presets import DISCLAIMER
from netsheet.utils import format_money

logger = logging.getLogger(__name__)

GRID = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("BOX", (0, 0), (-1, -1), 1, colors.black),
        ("INNERGRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("ALIGN", (1, 1), (1, -1), "RIGHT"),
    ]
)


def _as_dicts(warnings: Iterable[Any]) -> List[Dict[str, Any]]:
    return [w.model_dump() if hasattr(w, "model_dump") else dict(w) for w in warnings]


def _check_override(warnings: List[Dict[str, Any]], override_reason: Optional[str]) -> None:
    if any(w.get("severity") == "critical" for w in warnings) and not override_reason:
        raise ValueError("override_reason required when critical warnings exist")


def _shown(amount: float, kind: str) -> str:
    if kind in ("debit", "subtotal"):
        return f"({format_money(amount)})"
    return format_money(amount)


def deal_rows(result: NetSheetResult) -> List[List[str]]:
    rows = [["Closing date", result.closing_date.isoformat()], ["County", result.county]]
    rows += [[label, _shown(amount, kind)] for label, amount, kind in summary_rows(result)]
    return rows


def fee_rows(result: NetSheetResult, limit: Optional[int] = None) -> List[List[str]]:
    items = result.title_fees.items
    if limit is not None:
        items = items[:limit]
    return [[item.label, format_money(item.amount)] for item in items]


def tax_rows(result: NetSheetResult) -> List[List[str]]:
    t = result.tax
    return [
        ["Proration through", t.proration_end.isoformat()],
        ["Days in year", str(t.days_in_year)],
        ["Daily rate", format_money(round2(t.daily_rate))],
        ["Days accrued", str(t.days_accrued)],
        ["Accrued this year", format_money(round2(t.accrued_this_year))],
        ["Unpaid prior-year portion", format_money(round2(t.unpaid_prior_year))],
        ["Total estimated proration", format_money(result.tax_debit)],
    ]


def pdf_file_name(result: NetSheetResult) -> str:
    return f"Seller_Net_Sheet_{result.closing_date.isoformat()}.pdf"


def net_sheet_text(
    result: NetSheetResult,
    warnings: Iterable[Any] = (),
    override_reason: Optional[str] = None,
) -> str:
    """Plain-text rendition of the net sheet, in the same order as the PDF."""

    warn = _as_dicts(warnings)
    _check_override(warn, override_reason)
    lines = ["Seller Net Sheet (Estimate)", "Deal Summary:"]
    lines += [f"{k}: {v}" for k, v in deal_rows(result)]
    lines.append(f"Title Fees ({result.title_fees.schedule} schedule):")
    lines += [f"{k}: {v}" for k, v in fee_rows(result)]
    lines.append("Tax Proration Detail:")
    lines += [f"{k}: {v}" for k, v in tax_rows(result)]
    if warn:
        lines.append("Warnings:")
        for w in warn:
            lines.append(f"{w.get('severity', '')}: {w.get('message', '')}")
    if override_reason:
        lines.append(f"Override Reason: {override_reason}")
    lines.append(f"Disclaimer: {DISCLAIMER}")
    return "\n".join(lines)


def build_net_sheet_pdf(
    result: NetSheetResult,
    warnings: Iterable[Any] = (),
    override_reason: Optional[str] = None,
    branding: Optional[Dict[str, str]] = None,
) -> bytes:
    """Build the seller net sheet PDF and return its bytes.

    If any warning is ``critical`` an ``override_reason`` is required and is
    printed on the sheet.
    """

    warn = _as_dicts(warnings)
    _check_override(warn, override_reason)
    settings = get_settings()
    branding = branding or {}

    styles = getSampleStyleSheet()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=LETTER, leftMargin=36, rightMargin=36, topMargin=36, bottomMargin=36)
    story = []
    title = escape(branding.get("title", settings.brand_title))
    story += [Paragraph(f"<b>{title}</b>", styles["Title"]), Spacer(1, 6)]
    story.append(Paragraph("Seller Net Sheet (Estimate)", styles["Heading2"]))
    if branding.get("agent"):
        story.append(Paragraph(f"Prepared by: {escape(branding['agent'])}", styles["Normal"]))
    story += [Spacer(1, 12)]

    t = Table([["Deal Summary", ""]] + deal_rows(result), hAlign="LEFT", colWidths=[320, 200])
    t.setStyle(GRID)
    t.setStyle(TableStyle([("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")]))
    story += [t, Spacer(1, 12)]

    fees = fee_rows(result, limit=settings.pdf_max_fee_lines)
    if fees:
        t = Table([[f"Title Fees ({result.title_fees.schedule})", ""]] + fees, hAlign="LEFT", colWidths=[320, 200])
        t.setStyle(GRID)
        story += [t, Spacer(1, 12)]

    t = Table([["Indiana Tax Proration Detail", ""]] + tax_rows(result), hAlign="LEFT", colWidths=[320, 200])
    t.setStyle(GRID)
    story += [t, Spacer(1, 12)]

    if warn:
        w_rows = [["Code", "Severity", "Message"]] + [
            [w.get("code", ""), w.get("severity", ""), Paragraph(escape(w.get("message", "")), styles["Normal"])]
            for w in warn
        ]
        t = Table(w_rows, hAlign="LEFT", colWidths=[140, 70, 310])
        t.setStyle(GRID)
        story += [Paragraph("<b>Warnings</b>", styles["Heading3"]), Spacer(1, 6), t, Spacer(1, 12)]
    if override_reason:
        story.append(Paragraph(f"Override Reason: {escape(override_reason)}", styles["Normal"]))

    story += [Spacer(1, 12), Paragraph(f"<font size=8>{escape(DISCLAIMER)}</font>", styles["Normal"])]
    doc.build(story)
    logger.info("built net sheet PDF for closing %s", result.closing_date.isoformat())
    return buf.getvalue()
