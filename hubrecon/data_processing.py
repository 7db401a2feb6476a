#!/usr/bin/env python3

import logging
import zipfile
from collections import defaultdict

import pandas as pd
from fuzzywuzzy import fuzz

from .errors import AmbiguousColumn, EmptyOrUnreadableSheet, MissingRequiredColumn
from .normalizer import is_missing, normalize_amount, normalize_brand, normalize_date, normalize_header
from .profiles import DEFAULT_PROFILE
from .utils import column_letter_to_index

logger = logging.getLogger(__name__)

HUB_SOURCE = "Payments Hub"
SALES_SOURCE = "Sales Totals"

HUB_REQUIRED_COLUMNS = [
    "Date",
    "Customer Name",
    "Total Transaction Amount",
    "Cash Discounting Amount",
    "Card Brand",
]
SALES_REQUIRED_COLUMNS = ["Name", "Date Closed", "Amount"]

# Below this fuzz.ratio a header is not worth mentioning as a suggestion
SUGGESTION_MIN_SCORE = 60


def read_excel_table(file_path, source, sheet_name=0):
    """
    Read the first sheet (or ``sheet_name``) of a workbook into a DataFrame.

    Args:
        file_path (str): Path to the .xlsx / .xls file
        source (str): Source label used in log and error messages
        sheet_name (str or int): Sheet to read, first sheet by default

    Returns:
        pandas.DataFrame: Cleaned table (see clean_table)

    Raises:
        EmptyOrUnreadableSheet: If the workbook cannot be read or has no header
    """
    logger.info(f"📖 Reading {source} file: {file_path}")
    try:
        df = pd.read_excel(file_path, sheet_name=sheet_name)
    except (OSError, ValueError, KeyError, IndexError, zipfile.BadZipFile) as e:
        logger.error(f"❌ Could not read {source} file {file_path}: {str(e)}")
        raise EmptyOrUnreadableSheet(source, str(e)) from e

    logger.info(f"DEBUG: Raw {source} rows: {len(df)}")
    return clean_table(df, source)


def as_dataframe(table, source):
    """
    Accept a DataFrame or a list of rows whose first row is the header.

    Short rows are padded with None and long rows truncated to the header width.
    """
    if table is None:
        raise EmptyOrUnreadableSheet(source, "no table supplied")

    if isinstance(table, pd.DataFrame):
        return clean_table(table.copy(), source)

    rows = [list(row) if row is not None else [] for row in table]
    if not rows or not any(str(cell).strip() for cell in rows[0] if cell is not None):
        raise EmptyOrUnreadableSheet(source, "no header row")

    header = rows[0]
    width = len(header)
    body = [(row + [None] * width)[:width] for row in rows[1:]]
    df = pd.DataFrame(body, columns=header)
    return clean_table(df, source)


def clean_table(df, source):
    """Drop 'Unnamed:' columns and blank rows; require at least one header and unique labels."""
    unnamed = [str(col).startswith('Unnamed:') or normalize_header(col) == "" for col in df.columns]
    if any(unnamed):
        logger.info(f"Removing {sum(unnamed)} unnamed columns from {source} data")
        df = df.loc[:, [not flag for flag in unnamed]]

    if len(df.columns) == 0:
        raise EmptyOrUnreadableSheet(source, "no header row")

    duplicated = df.columns[df.columns.duplicated()]
    if len(duplicated):
        label = duplicated[0]
        logger.error(f"❌ {source}: header '{label}' appears more than once")
        raise AmbiguousColumn(source, label, [h for h in df.columns if h == label])

    # Remove completely empty rows (blank strings count as empty)
    keep = [
        not all(is_missing(value) or (isinstance(value, str) and not value.strip()) for value in row)
        for row in df.itertuples(index=False)
    ]
    df = df.loc[pd.Series(keep, index=df.index, dtype=bool)].reset_index(drop=True)
    if len(df) == 0:
        logger.warning(f"⚠ {source} sheet has a header but no data rows")
    return df


def closest_header(column_name, headers):
    """Best fuzzy candidate for a missing column as (header, score), or (None, 0)."""
    target = normalize_header(column_name)
    best_header, best_score = None, 0
    for header in headers:
        score = fuzz.ratio(target, normalize_header(header))
        if score > best_score:
            best_header, best_score = header, score
    return best_header, best_score


def resolve_columns(df, required_columns, source, profile=DEFAULT_PROFILE):
    """
    Locate every required column in ``df``.

    Lookup order:
    1. exact match on trimmed, case-insensitive header text; when several
       headers qualify only the one spelled exactly like the column is accepted
    2. fuzzy header match, only when the profile sets header_match_threshold
    3. fixed column letter, only when the profile lists one (degraded mode)

    Args:
        df: Source DataFrame
        required_columns: Canonical column names to find
        source: Source label (HUB_SOURCE / SALES_SOURCE)
        profile: ClientProfile supplying the fallbacks

    Returns:
        dict: canonical column name -> actual column label in df

    Raises:
        MissingRequiredColumn: For the first column that cannot be located
        AmbiguousColumn: When several headers qualify and none is spelled exactly
    """
    headers = list(df.columns)
    by_normalized = defaultdict(list)
    for header in headers:
        by_normalized[normalize_header(header)].append(header)

    positional = profile.positional_columns.get(source.lower(), {})
    resolved = {}

    for column in required_columns:
        candidates = by_normalized.get(normalize_header(column), [])
        if len(candidates) > 1:
            # several headers differ only in case or spacing; the exact label wins
            exact = [header for header in candidates if header == column]
            if len(exact) != 1:
                logger.error(f"❌ {source}: headers {candidates} all look like '{column}'")
                raise AmbiguousColumn(source, column, candidates)
            logger.warning(f"⚠ {source}: headers {candidates} all look like '{column}' - using '{column}'")
            candidates = exact
        if candidates:
            resolved[column] = candidates[0]
            continue

        candidate, score = closest_header(column, headers)
        if profile.header_match_threshold is not None and candidate is not None \
                and score >= profile.header_match_threshold:
            logger.warning(f"⚠ {source}: using header '{candidate}' for '{column}' (fuzzy score {score})")
            resolved[column] = candidate
            continue

        if column in positional:
            index = column_letter_to_index(positional[column])
            if index < len(headers):
                logger.warning(f"⚠ {source}: '{column}' not found - degraded mode, using column "
                               f"{positional[column]} ('{headers[index]}')")
                resolved[column] = headers[index]
                continue

        suggestion = candidate if score >= SUGGESTION_MIN_SCORE else None
        logger.error(f"❌ {source}: required column '{column}' not found. Columns: {headers}")
        raise MissingRequiredColumn(source, column, suggestion)

    claimed = defaultdict(list)
    for column, actual in resolved.items():
        claimed[actual].append(column)
    for actual, columns in claimed.items():
        if len(columns) > 1:
            logger.error(f"❌ {source}: header '{actual}' was picked for {columns}")
            raise AmbiguousColumn(source, columns[1], [actual])

    return resolved


def _rename_required(df, resolved):
    rename_map = {actual: column for column, actual in resolved.items() if actual != column}
    if rename_map:
        logger.info(f"Renamed columns: {rename_map}")
    return df.rename(columns=rename_map)


def _object_series(values, index):
    # dtype=object keeps datetime.date values and None as they are
    return pd.Series(list(values), index=index, dtype=object)


def preprocess_hub(hub_df, profile=DEFAULT_PROFILE):
    """
    Validate and normalize a Payments Hub table.

    Original columns are kept untouched for display; derived values are added
    as Date_Clean, Total_Clean, Discount_Clean, Net_Amount and CardBrand_Clean.
    """
    resolved = resolve_columns(hub_df, HUB_REQUIRED_COLUMNS, HUB_SOURCE, profile)
    hub_df = _rename_required(hub_df.copy(), resolved)

    hub_df["Date_Clean"] = _object_series((normalize_date(v) for v in hub_df["Date"]), hub_df.index)
    hub_df["Total_Clean"] = [normalize_amount(v) for v in hub_df["Total Transaction Amount"]]
    hub_df["Discount_Clean"] = [normalize_amount(v) for v in hub_df["Cash Discounting Amount"]]
    hub_df["Net_Amount"] = hub_df["Total_Clean"] - hub_df["Discount_Clean"]
    hub_df["CardBrand_Clean"] = [normalize_brand(v) for v in hub_df["Card Brand"]]

    undated = int(hub_df["Date_Clean"].isna().sum())
    if undated:
        logger.warning(f"⚠ {undated} {HUB_SOURCE} rows have no usable date and cannot match")

    logger.info(f"✓ Preprocessed {len(hub_df)} {HUB_SOURCE} rows")
    return hub_df


def preprocess_sales(sales_df, profile=DEFAULT_PROFILE):
    """Validate and normalize a Sales Totals table (DateClosed_Clean, Amount_Clean, Name_Clean)."""
    resolved = resolve_columns(sales_df, SALES_REQUIRED_COLUMNS, SALES_SOURCE, profile)
    sales_df = _rename_required(sales_df.copy(), resolved)

    sales_df["DateClosed_Clean"] = _object_series((normalize_date(v) for v in sales_df["Date Closed"]), sales_df.index)
    sales_df["Amount_Clean"] = [normalize_amount(v) for v in sales_df["Amount"]]
    sales_df["Name_Clean"] = [normalize_brand(v) for v in sales_df["Name"]]

    undated = int(sales_df["DateClosed_Clean"].isna().sum())
    if undated:
        logger.warning(f"⚠ {undated} {SALES_SOURCE} rows have no usable date and cannot match")

    logger.info(f"✓ Preprocessed {len(sales_df)} {SALES_SOURCE} rows")
    return sales_df
