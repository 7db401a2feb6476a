#!/usr/bin/env python3

"""
Client profiles.

Every client-specific variation of the reconciliation (amount tolerance,
brand aliases, which rows are reported, legacy column positions) is a
ClientProfile registered here at import time. Profiles are looked up by
client identifier; nothing is downloaded or executed at runtime.
"""

import logging
from dataclasses import dataclass, field, replace

from .matching_engine import DEFAULT_TOLERANCE, BrandRule, FilterMode

logger = logging.getLogger(__name__)

CANONICAL_BRANDS = ("Visa", "Mastercard", "American Express", "Discover")

# Lowercase fragment -> canonical label. Order matters: first hit wins.
DEFAULT_BRAND_ALIASES = {
    "visa": "Visa",
    "mastercard": "Mastercard",
    "master": "Mastercard",
    "american express": "American Express",
    "amex": "American Express",
    "discover": "Discover",
}


@dataclass(frozen=True)
class ClientProfile:
    name: str
    tolerance: float = DEFAULT_TOLERANCE
    brand_rule: BrandRule = BrandRule.CONTAINS
    brand_aliases: dict = field(default_factory=lambda: dict(DEFAULT_BRAND_ALIASES))
    canonical_brands: tuple = CANONICAL_BRANDS
    excluded_brand_terms: tuple = ("cash",)
    filter_mode: FilterMode = FilterMode.UNMATCHED
    strict_counts: bool = False
    # Minimum fuzz.ratio score for accepting a near-miss header; None disables it
    header_match_threshold: int = None
    # Degraded mode only: required column -> spreadsheet column letter
    positional_columns: dict = field(default_factory=dict)

    def with_overrides(self, **overrides):
        """Copy of this profile with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "filter_mode" in changes:
            changes["filter_mode"] = FilterMode(changes["filter_mode"])
        if "brand_rule" in changes:
            changes["brand_rule"] = BrandRule(changes["brand_rule"])
        return replace(self, **changes)


DEFAULT_PROFILE = ClientProfile(name="default")

_REGISTRY = {}


def register_profile(profile):
    key = profile.name.strip().lower()
    if key in _REGISTRY:
        logger.info(f"Replacing registered profile '{key}'")
    _REGISTRY[key] = profile
    return profile


def get_profile(client_id=None):
    """
    Look up a registered profile.

    Unknown or empty identifiers fall back to the default profile with a
    warning, so a typo in a client id never stops a run.
    """
    if not client_id:
        return DEFAULT_PROFILE
    key = str(client_id).strip().lower()
    profile = _REGISTRY.get(key)
    if profile is None:
        logger.warning(f"⚠ Unknown client '{client_id}' - using default profile. Available: {available_clients()}")
        return DEFAULT_PROFILE
    return profile


def available_clients():
    return sorted(_REGISTRY)


register_profile(DEFAULT_PROFILE)

# Older Payments Hub exports with unreliable headers: amounts are taken from
# columns K and R, and Sales Totals amounts from column E, when the named
# header is missing.
register_profile(ClientProfile(
    name="legacy-columns",
    header_match_threshold=90,
    positional_columns={
        "payments hub": {
            "Total Transaction Amount": "K",
            "Cash Discounting Amount": "R",
        },
        "sales totals": {
            "Amount": "E",
        },
    },
))

# Mutual count check: a hub row is only considered reconciled when the
# matching sales row matches exactly as many hub rows.
register_profile(ClientProfile(
    name="mutual-count",
    strict_counts=True,
))

register_profile(ClientProfile(
    name="exact-brand",
    brand_rule=BrandRule.EXACT,
    brand_aliases={},
))
