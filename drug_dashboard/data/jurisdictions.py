"""
Jurisdiction naming helpers.

Source tables identify states by abbreviation (``NSW``, ``vic`` ...) while the
boundary GeoJSON names features by full name (``New South Wales``).  Totals are
joined onto map features through ``normalize_jurisdiction``, which maps both
spellings onto the same lowercase full name.
"""

import logging

from ..core.config import JURISDICTION_NAMES, FEATURE_NAME_PROPERTIES
from ..core.utils import clean_text, is_blank

logger = logging.getLogger(__name__)

# Reverse table: full lowercase name -> abbreviation.
_ABBREVIATIONS = {full: abbr for abbr, full in JURISDICTION_NAMES.items()}


def normalize_jurisdiction(value) -> str:
    """Map a jurisdiction abbreviation to its lowercase GeoJSON name.

    The lookup is exact on the cleaned (see core.utils.clean_text), lowercased
    value.  Values outside the table (including names that are already full)
    pass through in that cleaned form, so the function is idempotent.

    Args:
        value: Raw jurisdiction cell, e.g. ``" NSW "`` or ``"Victoria"``.

    Returns:
        Lowercase full name, e.g. ``"new south wales"``; ``""`` for blanks.
    """
    key = clean_text(value).lower()
    return JURISDICTION_NAMES.get(key, key)


def jurisdiction_code(value) -> str:
    """Return the upper-case abbreviation for a code or full name."""
    name = normalize_jurisdiction(value)
    return _ABBREVIATIONS.get(name, name).upper()


def display_name(value) -> str:
    """Title-cased full name, e.g. ``"Australian Capital Territory"``."""
    return normalize_jurisdiction(value).title()


def jurisdiction_label(value) -> str:
    """Label used on the Pareto chart: ``"NSW - New South Wales"``.

    Unknown jurisdictions are shown as-is rather than with a duplicated name.
    """
    raw = "" if is_blank(value) else str(value).strip()
    name = normalize_jurisdiction(raw)
    if name in _ABBREVIATIONS:
        return f"{_ABBREVIATIONS[name].upper()} - {name.title()}"
    return raw


def feature_name(feature: dict) -> str:
    """Return the lowercase state name carried by a GeoJSON feature.

    Tries ``STATE_NAME`` first, then ``STE_NAME16`` (ABS 2016 boundaries),
    then ``name``.  Features without any of them return ``""``.
    """
    props = feature.get('properties') or {}
    for key in FEATURE_NAME_PROPERTIES:
        value = props.get(key)
        if not is_blank(value):
            return str(value).strip().lower()
    return ""


def feature_display_name(feature: dict) -> str:
    """Feature name as printed on the map (source capitalisation)."""
    props = feature.get('properties') or {}
    for key in FEATURE_NAME_PROPERTIES:
        value = props.get(key)
        if not is_blank(value):
            return str(value).strip()
    return ""
