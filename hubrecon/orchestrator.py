#!/usr/bin/env python3

import logging
import os

from .aggregator import summarize_by_brand
from .config import DEFAULT_OUTPUT_FILE
from .data_processing import (
    HUB_SOURCE,
    SALES_SOURCE,
    as_dataframe,
    preprocess_hub,
    preprocess_sales,
    read_excel_table,
)
from .errors import ReconciliationError
from .matching_engine import apply_strict_counts, count_matches, count_sales_matches, select_rows
from .output_handler import build_report_table, error_table, write_results_workbook
from .profiles import DEFAULT_PROFILE

logger = logging.getLogger(__name__)


def _match_options(profile):
    return {
        'tolerance': profile.tolerance,
        'brand_rule': profile.brand_rule,
        'aliases': profile.brand_aliases,
    }


def reconcile(hub_df, sales_df, profile=DEFAULT_PROFILE):
    """
    Run matching, filtering and aggregation on raw source tables.

    ``sales_df`` may be None, in which case no row can match and every hub row
    keeps a count of 0.

    Returns:
        tuple: (report_table, stats)

    Raises:
        ReconciliationError: For missing columns or empty sheets
    """
    logger.info("\n=== Starting Reconciliation ===")
    logger.info(f"Profile: {profile.name} (tolerance {profile.tolerance}, filter {profile.filter_mode.value})")

    clean_hub = preprocess_hub(hub_df, profile)
    clean_sales = preprocess_sales(sales_df, profile) if sales_df is not None else None

    options = _match_options(profile)
    count_column = "match_count"
    if clean_sales is None:
        logger.info("No Sales Totals data - single-file mode, no rows can match")
        clean_hub = clean_hub.copy()
        clean_hub["match_count"] = 0
    else:
        clean_hub = count_matches(clean_hub, clean_sales, **options)
        clean_sales = count_sales_matches(clean_hub, clean_sales, **options)
        if profile.strict_counts:
            clean_hub = apply_strict_counts(clean_hub, clean_sales, **options)
            count_column = "final_count"

    selected = select_rows(clean_hub, profile.filter_mode, count_column)

    logger.info("\n=== Card Brand Totals ===")
    summaries = summarize_by_brand(clean_hub, clean_sales, profile)
    table = build_report_table(selected, summaries)

    stats = {
        'hub_rows': len(clean_hub),
        'sales_rows': len(clean_sales) if clean_sales is not None else 0,
        'hub_matched_rows': int((clean_hub[count_column] > 0).sum()) if len(clean_hub) else 0,
        'sales_matched_rows': int((clean_sales["match_count"] > 0).sum()) if clean_sales is not None and len(clean_sales) else 0,
        'reported_rows': len(selected),
        'filter_mode': profile.filter_mode.value,
        'summaries': summaries,
    }
    stats['hub_unmatched_rows'] = stats['hub_rows'] - stats['hub_matched_rows']
    stats['sales_unmatched_rows'] = stats['sales_rows'] - stats['sales_matched_rows']
    return table, stats


def compare(source_a, source_b, profile=None):
    """
    Compare a Payments Hub table with a Sales Totals table.

    Both sources may be DataFrames or lists of rows with the header first.
    Fatal problems (missing required column, empty sheet) come back as a
    one-row error table instead of an exception, so the caller always gets a
    well-formed table.

    Args:
        source_a: Payments Hub table
        source_b: Sales Totals table
        profile: ClientProfile, the default profile when None

    Returns:
        list: Report rows (see output_handler.build_report_table)
    """
    profile = profile or DEFAULT_PROFILE
    try:
        hub_df = as_dataframe(source_a, HUB_SOURCE)
        sales_df = as_dataframe(source_b, SALES_SOURCE)
        table, _ = reconcile(hub_df, sales_df, profile)
        return table
    except ReconciliationError as e:
        logger.error(f"❌ Comparison failed: {str(e)}")
        return error_table(str(e))


def compare_single(source_a, profile=None):
    """Degraded mode for a missing Sales Totals file: every hub row is listed as unmatched."""
    profile = profile or DEFAULT_PROFILE
    try:
        hub_df = as_dataframe(source_a, HUB_SOURCE)
        table, _ = reconcile(hub_df, None, profile)
        return table
    except ReconciliationError as e:
        logger.error(f"❌ Comparison failed: {str(e)}")
        return error_table(str(e))


def run_matching_process(hub_file, sales_file=None, output_file=DEFAULT_OUTPUT_FILE, profile=None):
    """
    Read both workbooks, reconcile them and write the Results workbook.

    Args:
        hub_file (str): Path to the Payments Hub export
        sales_file (str, optional): Path to the Sales Totals export. When None
            the run degrades to single-file mode.
        output_file (str): Output workbook name, written next to the hub file
            unless it is an absolute path
        profile: ClientProfile, the default profile when None

    Returns:
        dict: table, output_file, error (None on success) and stats
    """
    profile = profile or DEFAULT_PROFILE
    logger.info("\n=== Starting Matching Process ===")
    logger.info(f"Reading files: {hub_file} and {sales_file or '(no Sales Totals file)'}")

    input_dir = os.path.dirname(os.path.abspath(hub_file))
    output_path = output_file if os.path.isabs(output_file) else os.path.join(input_dir, output_file)

    stats = {}
    error = None
    try:
        hub_df = read_excel_table(hub_file, HUB_SOURCE)
        sales_df = read_excel_table(sales_file, SALES_SOURCE) if sales_file else None
        table, stats = reconcile(hub_df, sales_df, profile)
    except ReconciliationError as e:
        logger.error(f"❌ Comparison failed: {str(e)}")
        error = str(e)
        table = error_table(error)

    write_results_workbook(table, output_path)

    if stats:
        logger.info("\n=== Final Results ===")
        logger.info(f"✓ {HUB_SOURCE} Records:")
        logger.info(f"  - Total rows: {stats['hub_rows']}")
        logger.info(f"  - Matched rows: {stats['hub_matched_rows']}")
        logger.info(f"  - Unmatched rows: {stats['hub_unmatched_rows']}")
        logger.info(f"✓ {SALES_SOURCE} Records:")
        logger.info(f"  - Total rows: {stats['sales_rows']}")
        logger.info(f"  - Matched rows: {stats['sales_matched_rows']}")
        logger.info(f"  - Unmatched rows: {stats['sales_unmatched_rows']}")
        logger.info(f"✓ Reported rows ({stats['filter_mode']}): {stats['reported_rows']}")

    return {
        'table': table,
        'output_file': output_path,
        'error': error,
        'stats': stats,
    }
