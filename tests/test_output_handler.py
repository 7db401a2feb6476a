from datetime import datetime

import pandas as pd
from openpyxl import load_workbook

from hubrecon.aggregator import BrandSummary
from hubrecon.output_handler import (
    DISCREPANCY_HEADER,
    REPORT_WIDTH,
    RESULTS_SHEET,
    SUMMARY_HEADER,
    build_report_table,
    error_table,
    find_summary_header,
    write_results_workbook,
)


def _selected():
    return pd.DataFrame({
        "Date": [datetime(2024, 1, 5, 19, 58), "01/06/2024"],
        "Customer Name": ["Jane", None],
        "Total Transaction Amount": [100.0, "$20.00"],
        "Cash Discounting Amount": [3.0, ""],
        "Card Brand": ["Visa", "Amex"],
        "Net_Amount": [97.0, 20.0],
    })


def test_report_layout():
    summaries = [BrandSummary("Visa", 97.0, 95.0), BrandSummary("Discover", 0.0, 0.0)]
    table = build_report_table(_selected(), summaries)

    assert table[0] == DISCREPANCY_HEADER
    assert table[1] == ["01/05/2024", "Jane", 100.0, 3.0, "Visa", 97.0]
    assert table[2] == ["01/06/2024", "", "$20.00", "", "Amex", 20.0]
    assert table[3] == [""] * REPORT_WIDTH
    assert table[4] == [""] * REPORT_WIDTH
    assert table[5] == SUMMARY_HEADER + ["", ""]
    assert table[6] == ["Visa", 97.0, 95.0, 2.0, "", ""]
    assert table[7] == ["Discover", 0.0, 0.0, 0.0, "", ""]
    assert all(len(row) == REPORT_WIDTH for row in table)
    assert find_summary_header(table) == 5


def test_summary_difference_matches_printed_totals():
    table = build_report_table(_selected().iloc[0:0], [BrandSummary("Visa", 0.105, 0.004)])
    brand, hub_total, sales_total, difference = table[-1][:4]
    assert round(hub_total - sales_total, 2) == difference


def test_error_table():
    assert error_table("boom") == [["Error", "boom"]]
    assert find_summary_header(error_table("boom")) == -1


def test_results_workbook_colors_differences(tmp_path):
    summaries = [BrandSummary("Visa", 90.0, 95.0), BrandSummary("Mastercard", 10.0, 10.0)]
    table = build_report_table(_selected(), summaries)
    path = tmp_path / "out.xlsx"

    assert write_results_workbook(table, str(path)) == str(path)

    workbook = load_workbook(path)
    assert workbook.sheetnames == [RESULTS_SHEET]
    sheet = workbook[RESULTS_SHEET]
    assert sheet["A1"].value == "Date"

    summary_row = find_summary_header(table) + 1
    negative = sheet.cell(row=summary_row + 1, column=4)
    zero = sheet.cell(row=summary_row + 2, column=4)
    assert negative.value == -5.0
    assert negative.fill.fgColor.rgb == "FFFF0000"
    assert zero.fill.fgColor.rgb == "FF92D050"


def test_error_workbook(tmp_path):
    path = tmp_path / "error.xlsx"
    write_results_workbook(error_table("Missing required column"), str(path))
    sheet = load_workbook(path)[RESULTS_SHEET]
    assert sheet["A1"].value == "Error"
    assert sheet["B1"].value == "Missing required column"
