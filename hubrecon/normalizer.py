#!/usr/bin/env python3

import logging
import math
import numbers
import re
from datetime import date, datetime, timedelta

import pandas as pd

from .errors import AmountParseFailure, DateParseFailure

logger = logging.getLogger(__name__)

# Day zero of the spreadsheet serial calendar (1900 system, leap-year bug included)
SERIAL_EPOCH = date(1899, 12, 30)

US_DATE_PATTERN = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})$')
ISO_DATE_PATTERN = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')
SERIAL_PATTERN = re.compile(r'^\d+(\.\d+)?$')
AMOUNT_STRIP_PATTERN = re.compile(r'[^0-9.\-]')


def is_missing(value):
    """True for None, NaN and NaT cells."""
    if value is None:
        return True
    try:
        return bool(pd.api.types.is_scalar(value) and pd.isna(value))
    except (TypeError, ValueError):
        return False


def normalize_header(value):
    if is_missing(value):
        return ""
    return " ".join(str(value).split()).lower()


def expand_two_digit_year(year):
    if year < 50:
        return 2000 + year
    return 1900 + year


def serial_to_date(serial):
    """Convert a spreadsheet serial number to a calendar date (time of day is dropped)."""
    try:
        days = float(serial)
    except (TypeError, ValueError) as e:
        raise DateParseFailure(serial) from e
    if math.isnan(days) or days < 1:
        raise DateParseFailure(serial)
    try:
        return SERIAL_EPOCH + timedelta(days=int(math.floor(days)))
    except OverflowError as e:
        raise DateParseFailure(serial) from e


def _strip_time_component(text):
    token = text.strip().split()[0] if text.strip() else ""
    # ISO timestamps such as 2025-03-13T19:58:00
    if "T" in token and ISO_DATE_PATTERN.match(token.split("T")[0]):
        token = token.split("T")[0]
    return token


def parse_date(value):
    """
    Parse a cell into a calendar date.

    Accepted inputs:
    - datetime / pandas Timestamp / date objects (any time part is discarded)
    - spreadsheet serial numbers (int, float or a purely numeric string)
    - strings in MM/DD/YYYY, MM/DD/YY or YYYY-MM-DD form, optionally followed
      by a time component

    Args:
        value: Raw cell value

    Returns:
        datetime.date: The calendar date

    Raises:
        DateParseFailure: If no rule can interpret the value
    """
    if is_missing(value) or isinstance(value, bool):
        raise DateParseFailure(value)

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, numbers.Real):
        return serial_to_date(value)

    text = _strip_time_component(str(value))
    if not text:
        raise DateParseFailure(value)

    try:
        match = US_DATE_PATTERN.match(text)
        if match:
            month, day, year = (int(part) for part in match.groups())
            if len(match.group(3)) == 2:
                year = expand_two_digit_year(year)
            return date(year, month, day)

        match = ISO_DATE_PATTERN.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return date(year, month, day)
    except ValueError as e:
        raise DateParseFailure(value) from e

    if SERIAL_PATTERN.match(text):
        return serial_to_date(text)

    raise DateParseFailure(value)


def normalize_date(value):
    """Lenient form of parse_date: unparseable values become None."""
    try:
        return parse_date(value)
    except DateParseFailure as e:
        if not is_missing(value):
            logger.debug(f"Date left unnormalized: {e}")
        return None


def parse_amount(value):
    """
    Parse a currency cell into a float.

    Numbers pass through unchanged. Strings keep only digits, '.' and '-'
    before parsing, so "$1,234.50" becomes 1234.5.

    Raises:
        AmountParseFailure: If nothing numeric is left
    """
    if is_missing(value) or isinstance(value, bool):
        raise AmountParseFailure(value)

    if isinstance(value, numbers.Real):
        return float(value)

    cleaned = AMOUNT_STRIP_PATTERN.sub('', str(value))
    try:
        return float(cleaned)
    except ValueError as e:
        raise AmountParseFailure(value) from e


def normalize_amount(value):
    try:
        return parse_amount(value)
    except AmountParseFailure as e:
        if not is_missing(value) and str(value).strip():
            logger.debug(f"Amount treated as 0: {e}")
        return 0.0


def normalize_brand(value):
    if is_missing(value):
        return ""
    return str(value).strip().lower()


def canonical_brand(value, aliases):
    """
    Resolve a brand or card-type name through an alias table.

    The alias keys are lowercase fragments ("amex", "master"); a name resolves
    when it contains a key or a key contains it. The first hit in table order wins.

    Args:
        value: Raw or normalized brand name
        aliases: Mapping of lowercase fragment -> canonical label

    Returns:
        str or None: Canonical label, or None when nothing resolves
    """
    name = normalize_brand(value)
    if not name or not aliases:
        return None
    for key, label in aliases.items():
        if key in name or name in key:
            return label
    return None
