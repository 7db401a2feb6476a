#!/usr/bin/env python3

import logging
from collections import defaultdict
from enum import Enum

import pandas as pd

from .normalizer import canonical_brand, is_missing

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.01


class BrandRule(str, Enum):
    EXACT = "exact"
    CONTAINS = "contains"


class FilterMode(str, Enum):
    """Which Payments Hub rows end up in the report section."""
    UNMATCHED = "unmatched"   # count == 0, rows without a settlement record
    MATCHED = "matched"       # count > 0


def brands_match(hub_brand, sales_name, brand_rule=BrandRule.CONTAINS, aliases=None):
    """
    Compare a normalized card brand with a normalized Sales Totals name.

    When an alias table is given and both sides resolve to a canonical brand,
    the canonical labels decide. Otherwise the brand rule applies to the
    normalized strings.
    """
    if not hub_brand or not sales_name:
        return False

    if aliases:
        hub_label = canonical_brand(hub_brand, aliases)
        sales_label = canonical_brand(sales_name, aliases)
        if hub_label and sales_label:
            return hub_label == sales_label

    if brand_rule == BrandRule.EXACT:
        return hub_brand == sales_name
    return hub_brand in sales_name or sales_name in hub_brand


def is_match(hub_row, sales_row, tolerance=DEFAULT_TOLERANCE, brand_rule=BrandRule.CONTAINS, aliases=None):
    """
    Match predicate between one Payments Hub row and one Sales Totals row.

    Args:
        hub_row: Preprocessed hub row (Date_Clean, CardBrand_Clean, Net_Amount)
        sales_row: Preprocessed sales row (DateClosed_Clean, Name_Clean, Amount_Clean)
        tolerance: Amounts closer than this are equal
        brand_rule: How brand and card-type names are compared
        aliases: Optional brand alias table

    Returns:
        bool: True when date, brand and net amount all agree
    """
    hub_date = hub_row["Date_Clean"]
    sales_date = sales_row["DateClosed_Clean"]
    if is_missing(hub_date) or is_missing(sales_date) or hub_date != sales_date:
        return False

    if not brands_match(hub_row["CardBrand_Clean"], sales_row["Name_Clean"], brand_rule, aliases):
        return False

    return abs(hub_row["Net_Amount"] - sales_row["Amount_Clean"]) < tolerance


def build_date_index(df, date_column):
    """Bucket row records by calendar date; rows without a date are left out."""
    index = defaultdict(list)
    for record in df.to_dict("records"):
        if not is_missing(record[date_column]):
            index[record[date_column]].append(record)
    return index


def _count_against(left_df, right_df, left_date, right_date, predicate, use_index):
    right_records = right_df.to_dict("records")
    right_index = build_date_index(right_df, right_date) if use_index else None

    counts = []
    for left in left_df.to_dict("records"):
        if use_index:
            candidates = right_index.get(left[left_date], []) if not is_missing(left[left_date]) else []
        else:
            candidates = right_records
        counts.append(sum(1 for right in candidates if predicate(left, right)))
    return counts


def count_matches(hub_df, sales_df, tolerance=DEFAULT_TOLERANCE, brand_rule=BrandRule.CONTAINS,
                  aliases=None, use_index=True):
    """
    Count, for every Payments Hub row, the Sales Totals rows that match it.

    Adds a ``match_count`` column to a copy of ``hub_df``. The date index only
    narrows the candidates; counts are the same as a full scan.
    """
    hub_df = hub_df.copy()

    def predicate(hub_row, sales_row):
        return is_match(hub_row, sales_row, tolerance, brand_rule, aliases)

    if len(sales_df) == 0:
        hub_df["match_count"] = 0
    else:
        hub_df["match_count"] = _count_against(
            hub_df, sales_df, "Date_Clean", "DateClosed_Clean", predicate, use_index
        )

    matched = int((hub_df["match_count"] > 0).sum()) if len(hub_df) else 0
    logger.info(f"✓ Hub rows with at least one match: {matched}/{len(hub_df)}")
    return hub_df


def count_sales_matches(hub_df, sales_df, tolerance=DEFAULT_TOLERANCE, brand_rule=BrandRule.CONTAINS,
                        aliases=None, use_index=True):
    """Reverse direction: add ``match_count`` to a copy of ``sales_df``."""
    sales_df = sales_df.copy()

    def predicate(sales_row, hub_row):
        return is_match(hub_row, sales_row, tolerance, brand_rule, aliases)

    if len(hub_df) == 0:
        sales_df["match_count"] = 0
    else:
        sales_df["match_count"] = _count_against(
            sales_df, hub_df, "DateClosed_Clean", "Date_Clean", predicate, use_index
        )
    return sales_df


def apply_strict_counts(hub_df, sales_df, tolerance=DEFAULT_TOLERANCE, brand_rule=BrandRule.CONTAINS,
                        aliases=None):
    """
    Mutual count check.

    A hub row's ``final_count`` is the number of matching sales rows whose own
    match count equals the hub row's match count. Two identical hub rows
    against one sales row therefore end up with final_count 0.

    Both frames must already carry ``match_count``.
    """
    hub_df = hub_df.copy()
    sales_index = build_date_index(sales_df, "DateClosed_Clean")

    final_counts = []
    for hub_row in hub_df.to_dict("records"):
        candidates = sales_index.get(hub_row["Date_Clean"], []) if not is_missing(hub_row["Date_Clean"]) else []
        final_counts.append(sum(
            1 for sales_row in candidates
            if is_match(hub_row, sales_row, tolerance, brand_rule, aliases)
            and sales_row["match_count"] == hub_row["match_count"]
        ))
    hub_df["final_count"] = final_counts
    return hub_df


def select_rows(hub_df, mode=FilterMode.UNMATCHED, count_column="match_count"):
    """Keep the hub rows the report should list, preserving input order."""
    mode = FilterMode(mode)
    if len(hub_df) == 0:
        return hub_df.copy()
    counts = pd.to_numeric(hub_df[count_column], errors="coerce").fillna(0)
    if mode == FilterMode.UNMATCHED:
        selected = hub_df[counts == 0]
    else:
        selected = hub_df[counts > 0]
    logger.info(f"Selected {len(selected)} {mode.value} hub rows (by {count_column})")
    return selected.copy()
