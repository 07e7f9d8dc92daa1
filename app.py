import streamlit as st

from netsheet.calculators import compute_net_sheet
from netsheet.config import get_settings
from netsheet import __version__
from netsheet.logging_config import get_logger, setup_logging
from ui.inputs import (
    init_net_sheet_state,
    render_commission_inputs,
    render_deal_inputs,
    render_other_costs,
    render_tax_inputs,
    render_title_fee_options,
    to_inputs,
)
from ui.results import render_results

settings = get_settings()
setup_logging(settings.log_level)
logger = get_logger(__name__)

st.set_page_config(page_title="Indiana Seller Net Sheet", layout="wide")


def compute_results():
    """Validate the form and recompute the net sheet into session state."""
    d = st.session_state.net_sheet
    try:
        inputs = to_inputs(d)
    except ValueError as e:
        st.error(f"Invalid input: {e}")
        return None
    result = compute_net_sheet(inputs)
    st.session_state["net_sheet_result"] = result.model_dump()
    logger.debug("net sheet recomputed: net=%s", result.net)
    return result


d = init_net_sheet_state()
render_title_fee_options(d)
render_tax_inputs(d)
st.sidebar.caption(f"v{__version__}")

st.title(settings.brand_title)
st.caption("Seller Net Sheet (Estimate) • Indiana arrears tax proration • Title fee schedules")

left, right = st.columns([1, 1])
with left:
    render_deal_inputs(d)
    render_commission_inputs(d)
    render_other_costs(d)
with right:
    result = compute_results()
    if result is not None:
        render_results(result)
