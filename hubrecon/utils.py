#!/usr/bin/env python3

import re
from datetime import date, datetime

from .normalizer import is_missing

COLUMN_LETTERS_PATTERN = re.compile(r'^[A-Za-z]{1,3}$')


def column_letter_to_index(letter):
    """Convert a spreadsheet column letter ("A", "K", "AH") to a zero-based index."""
    letter = str(letter).strip()
    if not COLUMN_LETTERS_PATTERN.match(letter):
        raise ValueError(f"Not a spreadsheet column letter: {letter!r}")
    index = 0
    for char in letter.upper():
        index = index * 26 + (ord(char) - ord('A') + 1)
    return index - 1


def round_amount(value):
    """Round to cents for output only. -0.0 is reported as 0.0."""
    rounded = round(float(value), 2)
    return 0.0 if rounded == 0 else rounded


def display_value(value):
    """
    Cell value as it should appear in the report.

    Date objects are shown as MM/DD/YYYY, missing cells as empty strings,
    everything else unchanged.
    """
    if is_missing(value):
        return ""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime("%m/%d/%Y")
    if hasattr(value, "item"):
        # numpy scalars
        return value.item()
    return value
