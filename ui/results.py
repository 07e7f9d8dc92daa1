import pandas as pd
import streamlit as st

from export.pdf_export import build_net_sheet_pdf, pdf_file_name
from netsheet.calculators import line_items_frame, round2
from netsheet.models import NetSheetResult
from netsheet.presets import DISCLAIMER
from netsheet.rules import evaluate_rules, has_blocking
from netsheet.utils import format_money


def render_summary(result: NetSheetResult):
    """Headline metrics and the deal summary table."""
    cols = st.columns(4)
    cols[0].metric("Sale price", format_money(result.sale_price))
    cols[1].metric("Title fees", format_money(result.title_fees.total))
    cols[2].metric("Tax proration", format_money(result.tax_debit))
    cols[3].metric("Estimated net to seller", format_money(result.net))

    df = line_items_frame(result)
    df["Amount"] = df["Amount"].map(format_money)
    st.dataframe(df[["Item", "Amount"]], hide_index=True)


def render_fee_detail(result: NetSheetResult):
    fees = result.title_fees
    with st.expander(f"Title fee detail ({fees.schedule} schedule)"):
        q = result.owner_policy
        if q.mode == "overflow":
            st.caption(f"Owner’s policy above chart: {format_money(q.chosen)}")
        else:
            st.caption(f"Owner’s policy band: {format_money(q.min)} to {format_money(q.max)}")
        df = pd.DataFrame(
            [{"Item": i.label, "Amount": format_money(i.amount)} for i in fees.items],
            columns=["Item", "Amount"],
        )
        st.table(df)
        st.markdown(f"**Total title fees: {format_money(fees.total)}**")


def render_tax_detail(result: NetSheetResult):
    t = result.tax
    with st.expander("Property tax proration detail"):
        st.write(f"Proration through: {t.proration_end.isoformat()}")
        st.write(f"Days accrued: {t.days_accrued} of {t.days_in_year}")
        st.write(f"Daily rate: {format_money(round2(t.daily_rate))}")
        st.write(f"Accrued this year: {format_money(round2(t.accrued_this_year))}")
        st.write(f"Installments paid: {format_money(round2(t.paid_total))}")
        st.write(f"Unpaid prior-year portion: {format_money(round2(t.unpaid_prior_year))}")
        st.markdown(f"**Total estimated proration: {format_money(result.tax_debit)}**")


def render_warnings(result: NetSheetResult):
    warnings = evaluate_rules(result)
    for r in warnings:
        if r.severity == "critical":
            st.error(f"[{r.code}] {r.message}")
        elif r.severity == "warn":
            st.warning(f"[{r.code}] {r.message}")
        else:
            st.info(f"[{r.code}] {r.message}")
    return warnings


def render_export(result: NetSheetResult, warnings):
    st.subheader("Export")
    override_reason = None
    if has_blocking(warnings):
        override_reason = st.text_input("Override reason (required to export)")
        if not override_reason:
            st.caption("Enter an override reason to enable the PDF download.")
            return
    try:
        pdf = build_net_sheet_pdf(result, warnings=warnings, override_reason=override_reason)
    except ValueError as e:
        st.error(str(e))
        return
    st.download_button(
        "Download PDF",
        data=pdf,
        file_name=pdf_file_name(result),
        mime="application/pdf",
    )


def render_results(result: NetSheetResult):
    render_summary(result)
    render_fee_detail(result)
    render_tax_detail(result)
    warnings = render_warnings(result)
    render_export(result, warnings)
    st.caption(DISCLAIMER)
