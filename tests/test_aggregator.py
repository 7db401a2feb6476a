import pytest

from conftest import hub_table, sales_table, to_frame
from hubrecon.aggregator import BrandSummary, brand_label, summarize_by_brand, totals
from hubrecon.data_processing import preprocess_hub, preprocess_sales
from hubrecon.profiles import CANONICAL_BRANDS, DEFAULT_BRAND_ALIASES, get_profile


def test_totals_group_by_alias_and_skip_cash():
    sales = preprocess_sales(to_frame(sales_table(
        ["Visa", "01/05/2024", 10.00],
        ["VISA DEBIT", "01/05/2024", 5.25],
        ["amex", "01/05/2024", 7.00],
        ["Cash", "01/05/2024", 100.00],
        ["Gift Card", "01/05/2024", 3.00],
    )))
    result = totals(sales, "Name_Clean", "Amount_Clean", DEFAULT_BRAND_ALIASES)
    assert result == pytest.approx({"Visa": 15.25, "American Express": 7.0, "gift card": 3.0})


def test_brand_label_falls_back_to_canonical_list():
    assert brand_label("visa", {}, CANONICAL_BRANDS) == "Visa"
    assert brand_label("Diners Club", {}, CANONICAL_BRANDS) == "diners club"


def test_summary_order_and_differences(hub_rows, sales_rows):
    hub = preprocess_hub(to_frame(hub_rows))
    sales = preprocess_sales(to_frame(sales_rows))
    summaries = summarize_by_brand(hub, sales)

    assert [s.brand for s in summaries] == list(CANONICAL_BRANDS)
    by_brand = {s.brand: s for s in summaries}
    assert by_brand["Visa"].hub_total == pytest.approx(97.0)
    assert by_brand["Mastercard"].sales_total == pytest.approx(48.5)
    assert by_brand["American Express"].difference == pytest.approx(-5.0)
    assert by_brand["Discover"] == BrandSummary("Discover", 0.0, 0.0)


def test_other_brands_follow_sorted():
    hub = preprocess_hub(to_frame(hub_table(
        ["01/05/2024", "A", 10.00, 0.00, "Union Pay"],
        ["01/05/2024", "B", 4.00, 0.00, "Diners"],
    )))
    sales = preprocess_sales(to_frame(sales_table(["JCB", "01/05/2024", 2.00])))
    summaries = summarize_by_brand(hub, sales)
    assert [s.brand for s in summaries[len(CANONICAL_BRANDS):]] == ["diners", "jcb", "union pay"]
    assert summaries[-1].difference == pytest.approx(10.0)


def test_exact_brand_profile_still_lists_canonical_brands():
    hub = preprocess_hub(to_frame(hub_table(["01/05/2024", "A", 10.00, 1.00, "VISA"])))
    summaries = summarize_by_brand(hub, None, get_profile("exact-brand"))
    assert summaries[0] == BrandSummary("Visa", 9.0, 0.0)
    assert len(summaries) == len(CANONICAL_BRANDS)
