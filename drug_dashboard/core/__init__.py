"""
Core module for the Drug Testing Dashboard.

Contains configuration constants and base utilities.
"""

from drug_dashboard.core.config import *
from drug_dashboard.core.utils import (
    clean_text,
    clean_text_series,
    coerce_int_series,
    is_blank,
    is_detected,
    detected_mask,
    validate_columns,
    setup_logging,
)

__all__ = [
    'clean_text',
    'clean_text_series',
    'coerce_int_series',
    'is_blank',
    'is_detected',
    'detected_mask',
    'validate_columns',
    'setup_logging',
]
