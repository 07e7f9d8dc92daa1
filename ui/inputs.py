import streamlit as st

from netsheet.config import get_settings
from netsheet.models import CommissionLine, NetSheetInputs, OtherCost
from netsheet.presets import IN_COUNTIES
from netsheet.utils import default_closing_date, parse_closing_date


def _defaults() -> dict:
    settings = get_settings()
    d = NetSheetInputs(
        sale_price=settings.default_sale_price,
        county=settings.default_county,
        prior_year_tax=settings.default_prior_year_tax,
        closing_date=default_closing_date(settings.closing_offset_days).isoformat(),
    ).model_dump()
    d["commissions"] = [dict(c, id=i) for i, c in enumerate(d["commissions"])]
    d["other_costs"] = [dict(c, id=i) for i, c in enumerate(d["other_costs"])]
    d["next_id"] = max(len(d["commissions"]), len(d["other_costs"]))
    return d


def init_net_sheet_state():
    st.session_state.setdefault("net_sheet", _defaults())
    return st.session_state.net_sheet


def _next_id(d: dict) -> int:
    d["next_id"] = d.get("next_id", 0) + 1
    return d["next_id"]


def render_deal_inputs(d: dict):
    st.subheader("Deal")
    d["sale_price"] = st.text_input("Sale price", value=d.get("sale_price", ""), help="e.g. 330,000")
    closing = parse_closing_date(d.get("closing_date"))
    d["closing_date"] = st.date_input("Closing date", value=closing).isoformat()
    county = d.get("county", "Marion")
    idx = IN_COUNTIES.index(county) if county in IN_COUNTIES else 0
    d["county"] = st.selectbox("County", IN_COUNTIES, index=idx)
    d["mortgage_payoff"] = st.text_input("Mortgage payoff", value=d.get("mortgage_payoff", "0"))
    d["seller_concessions"] = st.text_input("Seller concessions", value=d.get("seller_concessions", "0"))


def render_commission_inputs(d: dict):
    st.subheader("Commissions")
    for c in d.setdefault("commissions", []):
        cols = st.columns([2, 1, 1])
        cols[0].markdown(f"**{c['label']}**")
        c["basis"] = cols[1].radio(
            "Basis",
            ["pct", "flat"],
            index=0 if c.get("basis", "pct") == "pct" else 1,
            format_func=lambda x: "%" if x == "pct" else "$",
            key=f"comm_basis_{c['id']}",
            horizontal=True,
        )
        if c["basis"] == "pct":
            c["rate"] = cols[2].text_input("Rate %", value=c.get("rate", "3"), key=f"comm_rate_{c['id']}")
        else:
            c["flat"] = cols[2].text_input("Amount", value=c.get("flat", "0"), key=f"comm_flat_{c['id']}")


def render_other_costs(d: dict):
    st.subheader("Other seller-paid costs")
    rows = d.setdefault("other_costs", [])
    for c in list(rows):
        cols = st.columns([3, 2, 1])
        c["label"] = cols[0].text_input("Description", value=c.get("label", ""), key=f"other_label_{c['id']}")
        c["amount"] = cols[1].text_input("Amount", value=c.get("amount", "0"), key=f"other_amt_{c['id']}")
        if cols[2].button("Remove", key=f"other_rm_{c['id']}"):
            rows.remove(c)
            st.rerun()
    if st.button("Add cost"):
        rows.append({"id": _next_id(d), "label": "Other", "amount": "0"})
        st.rerun()


def render_title_fee_options(d: dict):
    with st.sidebar.expander("Title fees", expanded=True):
        d["transaction_type"] = st.radio(
            "Transaction type",
            ["with_loan", "cash"],
            index=0 if d.get("transaction_type", "with_loan") == "with_loan" else 1,
            format_func=lambda x: "Buyer financing" if x == "with_loan" else "Cash",
        )
        d["auto_owner_policy"] = st.checkbox(
            "Owner’s policy from premium chart", value=bool(d.get("auto_owner_policy", True))
        )
        if d["auto_owner_policy"]:
            choices = ["low", "mid", "high"]
            d["owner_policy_choice"] = st.selectbox(
                "Premium within band",
                choices,
                index=choices.index(d.get("owner_policy_choice", "mid")),
            )
        else:
            d["owner_policy_premium"] = st.text_input(
                "Owner’s policy premium", value=d.get("owner_policy_premium", "0")
            )
        d["include_settlement_fee"] = st.checkbox(
            "Settlement / closing fee", value=bool(d.get("include_settlement_fee", True))
        )
        d["include_cpl"] = st.checkbox("CPL", value=bool(d.get("include_cpl", True)))
        d["include_tieff"] = st.checkbox("TIEFF", value=bool(d.get("include_tieff", True)))
        d["include_deed_recording"] = st.checkbox(
            "Deed recording", value=bool(d.get("include_deed_recording", False))
        )
        d["use_simplifile"] = st.checkbox(
            "E-record via Simplifile",
            value=bool(d.get("use_simplifile", True)),
            disabled=not d["include_deed_recording"],
        )
        d["include_transfer_fee_sdf"] = st.checkbox(
            "County transfer fee + SDF", value=bool(d.get("include_transfer_fee_sdf", False))
        )


def render_tax_inputs(d: dict):
    with st.sidebar.expander("Property taxes", expanded=True):
        d["prior_year_tax"] = st.text_input(
            "Prior-year tax bill", value=d.get("prior_year_tax", "0"), help="Annual amount from the county treasurer"
        )
        d["spring_paid"] = st.checkbox("Spring installment paid", value=bool(d.get("spring_paid", False)))
        if d["spring_paid"]:
            d["spring_paid_amount"] = st.text_input("Spring amount", value=d.get("spring_paid_amount", ""))
        d["fall_paid"] = st.checkbox("Fall installment paid", value=bool(d.get("fall_paid", False)))
        if d["fall_paid"]:
            d["fall_paid_amount"] = st.text_input("Fall amount", value=d.get("fall_paid_amount", ""))
        d["prorate_through"] = st.radio(
            "Prorate through",
            ["day_before", "closing_date"],
            index=0 if d.get("prorate_through", "day_before") == "day_before" else 1,
            format_func=lambda x: "Day before closing" if x == "day_before" else "Closing date",
        )
        d["force_365"] = st.checkbox("Always use a 365-day year", value=bool(d.get("force_365", False)))


def to_inputs(d: dict) -> NetSheetInputs:
    """Validate the form dict into a ``NetSheetInputs`` snapshot."""
    data = {k: v for k, v in d.items() if k in NetSheetInputs.model_fields}
    data["commissions"] = tuple(
        CommissionLine(**{k: v for k, v in c.items() if k != "id"}) for c in d.get("commissions", [])
    )
    data["other_costs"] = tuple(
        OtherCost(**{k: v for k, v in c.items() if k != "id"}) for c in d.get("other_costs", [])
    )
    return NetSheetInputs(**data)
