"""Shared fixtures: small Payments Hub / Sales Totals tables in row-list form."""

import pandas as pd
import pytest

from hubrecon.data_processing import HUB_REQUIRED_COLUMNS, SALES_REQUIRED_COLUMNS

HUB_HEADER = list(HUB_REQUIRED_COLUMNS)
SALES_HEADER = list(SALES_REQUIRED_COLUMNS)


def hub_table(*rows):
    return [list(HUB_HEADER)] + [list(row) for row in rows]


def sales_table(*rows):
    return [list(SALES_HEADER)] + [list(row) for row in rows]


def to_frame(table):
    return pd.DataFrame(table[1:], columns=table[0])


@pytest.fixture
def jane_visa():
    return ["2024-01-05", "Jane", 100.00, 3.00, "Visa"]


@pytest.fixture
def hub_rows(jane_visa):
    return hub_table(
        jane_visa,
        ["01/06/2024 14:02", "Omar", 50.00, 1.50, "Mastercard"],
        ["01/06/2024", "Li", 20.00, 0.00, "American Express"],
        ["01/07/2024", "Cash customer", 15.00, 0.00, "Cash"],
    )


@pytest.fixture
def sales_rows():
    return sales_table(
        ["visa", "01/05/2024", 97.00],
        ["Mastercard", "1/6/24", "$48.50"],
        ["amex", "2024-01-06", 25.00],
    )
