#!/usr/bin/env python3

import logging

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill

from .utils import display_value, round_amount

logger = logging.getLogger(__name__)

RESULTS_SHEET = "Results"

DISCREPANCY_HEADER = [
    "Date",
    "Customer Name",
    "Total Transaction Amount",
    "Cash Discounting Amount",
    "Card Brand",
    "Total (-) Fee",
]
SUMMARY_HEADER = ["Card Brand", "Hub Report Total", "Sales Report Total", "Difference"]
REPORT_WIDTH = len(DISCREPANCY_HEADER)
SEPARATOR_ROWS = 2

NEGATIVE_FILL = PatternFill(patternType="solid", fgColor="FFFF0000")
POSITIVE_FILL = PatternFill(patternType="solid", fgColor="FF92D050")
NEGATIVE_FONT = Font(color="FFFFFFFF")
POSITIVE_FONT = Font(color="FF000000")


def _pad(row):
    return list(row) + [""] * (REPORT_WIDTH - len(row))


def discrepancy_rows(selected_hub_df):
    """Display rows for the selected hub records: original cells plus the computed net amount."""
    rows = []
    for record in selected_hub_df.to_dict("records"):
        rows.append([
            display_value(record["Date"]),
            display_value(record["Customer Name"]),
            display_value(record["Total Transaction Amount"]),
            display_value(record["Cash Discounting Amount"]),
            display_value(record["Card Brand"]),
            round_amount(record["Net_Amount"]),
        ])
    return rows


def summary_rows(summaries):
    """
    One row per brand. The difference is taken from the rounded totals so that
    Hub - Sales == Difference holds for the printed figures.
    """
    rows = []
    for summary in summaries:
        hub_total = round_amount(summary.hub_total)
        sales_total = round_amount(summary.sales_total)
        rows.append(_pad([summary.brand, hub_total, sales_total, round_amount(hub_total - sales_total)]))
    return rows


def build_report_table(selected_hub_df, summaries):
    """
    Assemble the final table.

    Layout:
        discrepancy header
        one row per selected hub record
        two blank separator rows
        summary header
        one row per brand

    Every row is REPORT_WIDTH cells wide.
    """
    table = [list(DISCREPANCY_HEADER)]
    table.extend(discrepancy_rows(selected_hub_df))
    table.extend([_pad([]) for _ in range(SEPARATOR_ROWS)])
    table.append(_pad(SUMMARY_HEADER))
    table.extend(summary_rows(summaries))
    return table


def error_table(message):
    return [["Error", str(message)]]


def find_summary_header(table):
    for i, row in enumerate(table):
        if row[:len(SUMMARY_HEADER)] == SUMMARY_HEADER:
            return i
    return -1


def write_results_workbook(table, output_path):
    """
    Write the report table to a workbook with a single 'Results' sheet.

    Difference cells in the summary block are filled red when negative
    (white text) and green otherwise.

    Args:
        table: Report table from build_report_table (or error_table)
        output_path: Destination .xlsx path

    Returns:
        str: The output path
    """
    df = pd.DataFrame(table)
    try:
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=RESULTS_SHEET, index=False, header=False)
            worksheet = writer.sheets[RESULTS_SHEET]

            summary_start = find_summary_header(table)
            if summary_start >= 0:
                for i in range(summary_start + 1, len(table)):
                    difference = table[i][3]
                    if not isinstance(difference, (int, float)):
                        continue
                    cell = worksheet.cell(row=i + 1, column=4)
                    cell.fill = NEGATIVE_FILL if difference < 0 else POSITIVE_FILL
                    cell.font = NEGATIVE_FONT if difference < 0 else POSITIVE_FONT
                    cell.alignment = Alignment(horizontal="right")
    except Exception as e:
        logger.error(f"Error writing to Excel: {str(e)}")
        raise

    logger.info(f"✓ Results saved to: {output_path}")
    return output_path
