#!/usr/bin/env python3

import logging
from dataclasses import dataclass

from .normalizer import canonical_brand, normalize_brand
from .profiles import DEFAULT_PROFILE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrandSummary:
    brand: str
    hub_total: float
    sales_total: float

    @property
    def difference(self):
        return self.hub_total - self.sales_total


def brand_label(value, aliases, canonical_brands=()):
    """Canonical label when the alias table or the canonical list knows the brand, else the normalized key."""
    key = normalize_brand(value)
    label = canonical_brand(key, aliases)
    if label:
        return label
    for brand in canonical_brands:
        if brand.lower() == key:
            return brand
    return key


def totals(df, brand_column, amount_column, aliases=None, excluded_terms=("cash",), canonical_brands=()):
    """
    Sum amounts per card brand.

    Args:
        df: Preprocessed DataFrame
        brand_column: Column holding the brand / card type name
        amount_column: Numeric column to sum
        aliases: Optional alias table (see profiles.DEFAULT_BRAND_ALIASES)
        excluded_terms: Brands containing any of these fragments are skipped
        canonical_brands: Labels matched case-insensitively when no alias applies

    Returns:
        dict: brand label -> summed amount, in first-seen order
    """
    sums = {}
    skipped = 0
    for brand, amount in zip(df[brand_column], df[amount_column]):
        key = normalize_brand(brand)
        if not key:
            continue
        if any(term in key for term in excluded_terms):
            skipped += 1
            continue
        label = brand_label(key, aliases, canonical_brands)
        sums[label] = sums.get(label, 0.0) + float(amount)

    if skipped:
        logger.debug(f"Skipped {skipped} rows with excluded brands {excluded_terms}")
    return sums


def summarize_by_brand(hub_df, sales_df, profile=DEFAULT_PROFILE):
    """
    Build the per-brand comparison.

    Canonical brands come first in their configured order and are always
    listed, with 0 when a source has none. Any other brand found in either
    source follows, sorted by label.
    """
    hub_totals = totals(hub_df, "CardBrand_Clean", "Net_Amount",
                        profile.brand_aliases, profile.excluded_brand_terms, profile.canonical_brands)
    if sales_df is not None:
        sales_totals = totals(sales_df, "Name_Clean", "Amount_Clean",
                              profile.brand_aliases, profile.excluded_brand_terms, profile.canonical_brands)
    else:
        sales_totals = {}

    summaries = [
        BrandSummary(brand, hub_totals.get(brand, 0.0), sales_totals.get(brand, 0.0))
        for brand in profile.canonical_brands
    ]

    others = sorted((set(hub_totals) | set(sales_totals)) - set(profile.canonical_brands))
    for brand in others:
        summaries.append(BrandSummary(brand, hub_totals.get(brand, 0.0), sales_totals.get(brand, 0.0)))

    for summary in summaries:
        logger.info(f"  - {summary.brand}: hub {summary.hub_total:,.2f} / sales {summary.sales_total:,.2f} "
                    f"/ difference {summary.difference:,.2f}")
    return summaries
