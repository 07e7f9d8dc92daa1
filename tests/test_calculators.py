from datetime import date

import pytest

from netsheet.calculators import (
    arrears_tax_proration,
    compute_net_sheet,
    days_between_inclusive,
    fee_schedule_for_county,
    is_leap_year,
    line_items_frame,
    nz,
    owners_policy_premium,
    parse_money,
    parse_percent,
    round2,
    seller_net,
    seller_title_fees,
    settlement_fee,
    summary_rows,
)
from netsheet.models import (
    CommissionLine,
    Installment,
    NetSheetInputs,
    OtherCost,
    TaxSettings,
    TitleFeeSettings,
)
from netsheet.presets import STANDARD_SCHEDULE, VALPARAISO_SCHEDULE, load_tier_table


def test_nz_handles_blanks():
    assert nz(None) == 0.0
    assert nz("") == 0.0
    assert nz(float("nan"), 5.0) == 5.0
    assert nz("12.5") == 12.5


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("$330,000", 330000.0),
        ("  1,234.56 ", 1234.56),
        ("", 0.0),
        (None, 0.0),
        ("abc", 0.0),
        ("12abc", 0.0),
        ("-500", 0.0),
        ("inf", 0.0),
        ("nan", 0.0),
        (float("inf"), 0.0),
        (True, 0.0),
        (250, 250.0),
    ],
)
def test_parse_money(raw, expected):
    assert parse_money(raw) == expected


def test_parse_percent():
    assert parse_percent("3") == 3.0
    assert parse_percent("2.5 %") == 2.5
    assert parse_percent("three") == 0.0


def test_round2_half_up_and_idempotent():
    assert round2(2.675) == 2.68
    assert round2(0.125) == 0.13
    assert round2(214.5) == 214.5
    assert round2(round2(1234.5678)) == round2(1234.5678) == 1234.57
    assert round2(None) == 0.0


# owner's policy premium


def test_first_row_band_edges_and_midpoint():
    assert owners_policy_premium(50000, "low").chosen == 209
    assert owners_policy_premium(50000, "high").chosen == 220
    assert owners_policy_premium(50000, "mid").chosen == 214.50
    q = owners_policy_premium(50000, "mid")
    assert (q.min, q.max, q.mode) == (209, 220, "table")


def test_every_amount_in_a_row_gets_the_same_band():
    for amt in (300001, 305000, 310000):
        assert owners_policy_premium(amt, "low").chosen == 988
        assert owners_policy_premium(amt, "high").chosen == 1012


def test_fractional_amount_between_rows_uses_next_row():
    assert owners_policy_premium(50000.5, "low").chosen == 225


def test_negative_liability_clamps_to_first_row():
    assert owners_policy_premium(-10, "low").chosen == 209
    assert owners_policy_premium(0, "high").chosen == 220


def test_unknown_choice_uses_midpoint():
    assert owners_policy_premium(50000, "bogus").chosen == 214.50


def test_overflow_steps():
    assert owners_policy_premium(1000000).mode == "table"
    assert owners_policy_premium(1000000, "high").chosen == 2728
    q = owners_policy_premium(1000001)
    assert q.mode == "overflow"
    assert q.chosen == q.min == q.max == 2750
    assert owners_policy_premium(1010000).chosen == 2750
    assert owners_policy_premium(1010001).chosen == 2772
    assert owners_policy_premium(1010000.01).chosen == 2772


SMALL_TABLE = load_tier_table("low,high,band_low,band_high\n0,100,1,2\n101,200,3,4\n")


def test_custom_table_top_row_and_overflow():
    assert owners_policy_premium(200, "high", table=SMALL_TABLE).chosen == 4
    assert owners_policy_premium(150, "low", table=SMALL_TABLE).chosen == 3
    q = owners_policy_premium(500, "high", table=SMALL_TABLE)
    assert q.mode == "overflow"
    assert q.chosen == 4 + 22
    assert owners_policy_premium(10201, table=SMALL_TABLE).chosen == 4 + 2 * 22


def test_overflow_is_non_decreasing():
    amounts = [1000001 + i * 3333.33 for i in range(60)]
    premiums = [owners_policy_premium(a).chosen for a in amounts]
    assert premiums == sorted(premiums)


# fee schedules and title fees


@pytest.mark.parametrize("county", ["Lake", " porter ", "ST. JOSEPH", "LaPorte", "Cass"])
def test_valparaiso_counties(county):
    assert fee_schedule_for_county(county) is VALPARAISO_SCHEDULE


@pytest.mark.parametrize("county", ["Marion", "Hamilton", "", None, "Nowhere"])
def test_other_counties_use_standard(county):
    assert fee_schedule_for_county(county) is STANDARD_SCHEDULE


def test_settlement_fee_is_seller_half():
    assert settlement_fee(STANDARD_SCHEDULE, "with_loan") == 195.0
    assert settlement_fee(STANDARD_SCHEDULE, "cash") == 145.0
    unsplit = STANDARD_SCHEDULE.model_copy(update={"settlement_split": False})
    assert settlement_fee(unsplit, "cash") == 290.0


def test_default_fee_items_in_order():
    fees = seller_title_fees(TitleFeeSettings(county="Marion", owner_policy_premium=1055.0))
    assert [i.label for i in fees.items] == [
        "Owner’s title policy (estimate)",
        "Settlement / closing fee (seller)",
        "Title processing fee (seller)",
        "Closing processing fee (seller)",
        "CPL (seller)",
        "TIEFF (seller)",
    ]
    assert fees.schedule == "Standard"
    assert fees.total == 1055 + 195 + 175 + 150 + 25 + 5


def test_all_toggles_on_marion():
    fees = seller_title_fees(
        TitleFeeSettings(county="Marion", include_deed_recording=True, include_transfer_fee_sdf=True)
    )
    labels = [i.label for i in fees.items]
    assert labels[-3:] == ["Recording fee: deed", "Simplifile submission (deed)", "County transfer fee + SDF"]
    amounts = {i.label: i.amount for i in fees.items}
    assert amounts["Recording fee: deed"] == 35.0
    assert amounts["Simplifile submission (deed)"] == 4.25
    assert fees.total == 195 + 175 + 150 + 25 + 5 + 35 + 4.25 + 30


def test_deed_recording_other_county_without_simplifile():
    fees = seller_title_fees(
        TitleFeeSettings(county="Hamilton", include_deed_recording=True, use_simplifile=False)
    )
    amounts = {i.label: i.amount for i in fees.items}
    assert amounts["Recording fee: deed"] == 25.0
    assert "Simplifile submission (deed)" not in amounts


def test_simplifile_needs_deed_recording():
    fees = seller_title_fees(TitleFeeSettings(use_simplifile=True, include_deed_recording=False))
    assert all("Simplifile" not in i.label for i in fees.items)


def test_toggles_off_keep_processing_fees():
    fees = seller_title_fees(
        TitleFeeSettings(include_settlement_fee=False, include_cpl=False, include_tieff=False)
    )
    assert [i.label for i in fees.items] == [
        "Title processing fee (seller)",
        "Closing processing fee (seller)",
    ]
    assert fees.total == 325.0


def test_valparaiso_fee_total():
    fees = seller_title_fees(TitleFeeSettings(county="Lake"))
    assert fees.schedule == "Valparaiso"
    assert fees.total == 195 + 225 + 175 + 25 + 5


def test_zero_premium_is_omitted():
    fees = seller_title_fees(TitleFeeSettings(owner_policy_premium=0))
    assert fees.items[0].label == "Settlement / closing fee (seller)"


# tax proration


def _tax(**kw):
    base = dict(prior_year_tax=3650.0, force_365=True)
    base.update(kw)
    return TaxSettings(**base)


def test_closing_jan_first_accrues_nothing():
    t = arrears_tax_proration(date(2025, 1, 1), _tax())
    assert t.prior_year_tax == 3650.0
    assert t.proration_end == date(2024, 12, 31)
    assert t.days_accrued == 0
    assert t.daily_rate == 10.0
    assert t.accrued_this_year == 0


def test_closing_jan_tenth_day_before():
    t = arrears_tax_proration(date(2025, 1, 10), _tax())
    assert t.proration_end == date(2025, 1, 9)
    assert t.days_accrued == 9
    assert t.accrued_this_year == pytest.approx(90.0)
    assert t.total_debit == pytest.approx(3650 + 90)


def test_policies_differ_by_one_day():
    closing = date(2025, 6, 15)
    before = arrears_tax_proration(closing, _tax(prorate_through="day_before"))
    through = arrears_tax_proration(closing, _tax(prorate_through="closing_date"))
    assert through.days_accrued - before.days_accrued == 1
    assert through.accrued_this_year - before.accrued_this_year == pytest.approx(before.daily_rate)


def test_leap_year_day_count():
    assert is_leap_year(2024) and is_leap_year(2000)
    assert not is_leap_year(1900) and not is_leap_year(2025)
    assert arrears_tax_proration(date(2024, 3, 1), _tax(force_365=False)).days_in_year == 366
    assert arrears_tax_proration(date(2024, 3, 1), _tax(force_365=True)).days_in_year == 365
    assert arrears_tax_proration(date(2025, 3, 1), _tax(force_365=False)).days_in_year == 365


def test_days_between_inclusive():
    assert days_between_inclusive(date(2025, 1, 1), date(2025, 1, 1)) == 1
    assert days_between_inclusive(date(2025, 1, 1), date(2025, 12, 31)) == 365
    assert days_between_inclusive(date(2025, 1, 2), date(2025, 1, 1)) == 0


def test_paying_installments_never_raises_debit():
    closing = date(2025, 8, 1)
    inst = dict(spring=Installment(paid=False, amount=1825), fall=Installment(paid=False, amount=1825))
    none_paid = arrears_tax_proration(closing, _tax(**inst))
    spring_paid = arrears_tax_proration(
        closing, _tax(spring=Installment(paid=True, amount=1825), fall=inst["fall"])
    )
    both_paid = arrears_tax_proration(
        closing, _tax(spring=Installment(paid=True, amount=1825), fall=Installment(paid=True, amount=1825))
    )
    assert none_paid.total_debit >= spring_paid.total_debit >= both_paid.total_debit
    assert none_paid.paid_total == 0
    assert both_paid.unpaid_prior_year == 0


def test_overpaid_installments_clamp_to_zero():
    t = arrears_tax_proration(
        date(2025, 1, 10),
        _tax(spring=Installment(paid=True, amount=3000), fall=Installment(paid=True, amount=3000)),
    )
    assert t.paid_total == 6000
    assert t.unpaid_prior_year == 0
    assert t.total_debit == pytest.approx(t.accrued_this_year)


# net sheet


def test_seller_net_may_be_negative():
    assert seller_net(100000, [3000, 3000], 120000, 0, [], 550, 1000) == -27550.0


def _inputs(**kw):
    base = dict(
        sale_price="200,000",
        closing_date="2025-07-01",
        county="Marion",
        mortgage_payoff="100,000",
        seller_concessions="2,500",
        other_costs=(OtherCost(label="Home warranty", amount="500"),),
        prior_year_tax="3,650",
        force_365=True,
        spring_paid=True,
        spring_paid_amount="1,825",
    )
    base.update(kw)
    return NetSheetInputs(**base)


def test_compute_net_sheet_end_to_end():
    r = compute_net_sheet(_inputs())
    assert r.sale_price == 200000
    assert [c.amount for c in r.commissions] == [6000.0, 6000.0]
    assert r.total_commission == 12000.0
    assert r.owner_policy.chosen == 697.5
    assert r.title_fees.total == 1247.5
    assert r.tax.days_accrued == 181
    assert r.tax_debit == 3635.0
    assert r.net == 80117.5
    assert r.schedule_name == "Standard"
    assert r.primary_recording_tier


def test_negative_net_is_reported():
    r = compute_net_sheet(_inputs(mortgage_payoff="250,000"))
    assert r.net == -69882.5


def test_flat_commission_and_manual_premium():
    r = compute_net_sheet(
        _inputs(
            commissions=(
                CommissionLine(label="Listing agent commission", basis="flat", flat="$5,000"),
            ),
            auto_owner_policy=False,
            owner_policy_premium="800",
        )
    )
    assert r.total_commission == 5000.0
    assert r.title_fees.items[0].amount == 800.0
    assert r.net == 80117.5 + 7000 + 697.5 - 800


def test_blank_installment_amount_defaults_to_half():
    r = compute_net_sheet(_inputs(spring_paid_amount=""))
    assert r.tax.paid_total == 1825.0


def test_invalid_closing_date_uses_today():
    r = compute_net_sheet(_inputs(closing_date="2025-02-30"), today=date(2025, 3, 15))
    assert r.closing_date == date(2025, 3, 15)


def test_same_inputs_same_result():
    assert compute_net_sheet(_inputs()) == compute_net_sheet(_inputs())


def test_summary_rows_order():
    r = compute_net_sheet(_inputs())
    labels = [row[0] for row in summary_rows(r)]
    assert labels == [
        "Sale price",
        "Listing agent commission",
        "Buyer’s agent commission",
        "Total commission",
        "Mortgage payoff",
        "Seller concessions",
        "Other seller-paid costs",
        "Title fees (seller)",
        "Estimated property tax proration (IN arrears)",
        "Estimated net to seller",
    ]
    assert summary_rows(r)[-1] == ("Estimated net to seller", 80117.5, "net")


def test_single_commission_has_no_subtotal():
    r = compute_net_sheet(_inputs(commissions=(CommissionLine(label="Listing agent commission", rate="5"),)))
    kinds = [row[2] for row in summary_rows(r)]
    assert "subtotal" not in kinds


def test_line_items_frame():
    df = line_items_frame(compute_net_sheet(_inputs()))
    assert list(df.columns) == ["Item", "Amount", "Kind"]
    assert df.iloc[-1]["Amount"] == 80117.5
