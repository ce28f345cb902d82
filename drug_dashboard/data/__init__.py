"""
Data module for the Drug Testing Dashboard.

Contains CSV / GeoJSON loading, column normalization and jurisdiction naming.
"""

from .loader import (
    DataLoadError,
    read_csv,
    normalize_columns,
    melt_year_columns,
    load_cleaned_data,
    load_age_year_table,
    load_jurisdiction_totals,
    load_geojson,
)
from .jurisdictions import (
    normalize_jurisdiction,
    jurisdiction_code,
    jurisdiction_label,
    display_name,
    feature_name,
    feature_display_name,
)

__all__ = [
    'DataLoadError',
    'read_csv',
    'normalize_columns',
    'melt_year_columns',
    'load_cleaned_data',
    'load_age_year_table',
    'load_jurisdiction_totals',
    'load_geojson',
    'normalize_jurisdiction',
    'jurisdiction_code',
    'jurisdiction_label',
    'display_name',
    'feature_name',
    'feature_display_name',
]
