"""
Drug Testing Dashboard - Data Loading & Normalization
=====================================================

This module is the single entry point for data ingestion.  It reads the CSV
exports and the state boundary GeoJSON (from the data directory or from an
http(s) URL), normalises the inconsistent column headers into one canonical
schema, and coerces values so the aggregation layer never sees strings where
it expects numbers.

Data Flow
---------
1. Source name / path / URL  -->  resolve_source()  -->  raw text
2. Raw text  -->  pd.read_csv (all columns as strings)
3. normalize_columns():
   - pick the first alias present for every canonical column
     (YEAR/year, COUNT/Sum(COUNT)/positive_count, ...)
   - lowercase the drug flag columns
   - coerce numeric columns to int (failures become 0)
   - trim categorical columns, blanks become ""
4. Derived helpers:
   - jurisdiction_name : lowercase GeoJSON name for map joins

The wide age table (AGE_GROUP, 2023, 2024) is melted to long rows by
melt_year_columns() so it can share the aggregation code path.

Errors
------
Every failure to obtain or parse a source raises DataLoadError.  Callers
(the dashboard pages) catch it and show a placeholder for the affected chart
only.  Nothing is retried.
"""

import io
import json
import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import requests

from ..core.config import (
    DATA_DIR, CLEANED_DATA_FILE, CHART1_DATA_FILE, GEOJSON_FILE, HTTP_TIMEOUT,
    COLUMN_ALIASES, NUMERIC_COLUMNS, TEXT_COLUMNS, REQUIRED_COLUMNS, DRUG_COLUMNS,
)
from ..core.utils import clean_text_series, coerce_int_series, validate_columns
from .jurisdictions import normalize_jurisdiction, feature_name

logger = logging.getLogger(__name__)

Source = Union[str, Path]


class DataLoadError(ValueError):
    """A required CSV / GeoJSON source could not be fetched or parsed."""


def is_url(source: Source) -> bool:
    return str(source).lower().startswith(('http://', 'https://'))


def resolve_source(source: Source, data_dir: Optional[Source] = None) -> Source:
    """Turn a bare file name into a path inside the data directory.

    URLs and paths that already exist are returned unchanged, so callers can
    pass either ``"cleanedData.csv"`` or ``"/srv/exports/cleanedData.csv"``.
    """
    if is_url(source):
        return str(source)
    path = Path(source)
    if path.is_absolute() or path.exists():
        return path
    return Path(data_dir if data_dir is not None else DATA_DIR) / path


def read_source_text(source: Source, data_dir: Optional[Source] = None) -> str:
    """Return the text content of a local file or http(s) resource.

    Raises:
        DataLoadError: If the file is missing, unreadable, or the HTTP request
                       fails or returns an error status.
    """
    resolved = resolve_source(source, data_dir)
    if is_url(resolved):
        try:
            response = requests.get(resolved, timeout=HTTP_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Fetch failed for {resolved}: {e}")
            raise DataLoadError(f"Could not fetch {resolved}: {e}") from e
        return response.text

    path = Path(resolved)
    if not path.exists():
        logger.error(f"Data file not found: {path}")
        raise DataLoadError(f"File not found: {path}")
    try:
        return path.read_text(encoding='utf-8-sig')
    except OSError as e:
        logger.error(f"Could not read {path}: {e}")
        raise DataLoadError(f"Could not read {path}: {e}") from e


def read_csv(source: Source, data_dir: Optional[Source] = None) -> pd.DataFrame:
    """Read a CSV source with every column as string (no type guessing)."""
    text = read_source_text(source, data_dir)
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataLoadError(f"Cannot parse CSV {source}: {e}") from e
    logger.info(f"Loaded {len(df)} rows from {source}")
    return df


def _pick_column(raw: pd.DataFrame, aliases) -> Optional[str]:
    """First alias present in ``raw`` whose column is not entirely empty."""
    present = [a for a in aliases if a in raw.columns]
    for alias in present:
        if raw[alias].notna().any():
            return alias
    return present[0] if present else None


def normalize_columns(raw: pd.DataFrame) -> pd.DataFrame:
    """Map raw CSV headers onto the canonical schema.

    Columns missing from the source are created empty ("" for text, 0 for
    numbers) after a warning, so downstream charts render a "no data" state
    instead of failing with a KeyError.

    Args:
        raw: DataFrame as read by read_csv().

    Returns:
        New DataFrame with canonical columns, drug flag columns in lowercase,
        and a derived ``jurisdiction_name`` column.
    """
    df = pd.DataFrame(index=raw.index)

    for canonical, aliases in COLUMN_ALIASES.items():
        col = _pick_column(raw, aliases)
        if col is not None:
            df[canonical] = raw[col]

    # Drug columns appear as AMPHETAMINE, amphetamine or Amphetamine.
    lower_lookup = {c.lower(): c for c in raw.columns}
    for drug in DRUG_COLUMNS:
        if drug in lower_lookup:
            df[drug] = raw[lower_lookup[drug]]

    validate_columns(df, REQUIRED_COLUMNS)

    for col in NUMERIC_COLUMNS:
        df[col] = coerce_int_series(df[col]) if col in df.columns else 0

    for col in TEXT_COLUMNS:
        df[col] = clean_text_series(df[col]) if col in df.columns else ""

    df['best_detection_method'] = df['best_detection_method'].str.lower()
    df['jurisdiction_name'] = df['jurisdiction'].map(normalize_jurisdiction)

    for drug in DRUG_COLUMNS:
        if drug in df.columns:
            df[drug] = clean_text_series(df[drug])
        else:
            df[drug] = ""

    return df.reset_index(drop=True)


def load_cleaned_data(source: Source = CLEANED_DATA_FILE,
                      data_dir: Optional[Source] = None) -> pd.DataFrame:
    """Load and normalise the row-level drug testing table."""
    df = normalize_columns(read_csv(source, data_dir))
    logger.info(f"Normalised {len(df)} rows ({df['jurisdiction'].ne('').sum()} with jurisdiction)")
    return df


def melt_year_columns(raw: pd.DataFrame, id_column: str = 'age_group') -> pd.DataFrame:
    """Reshape a wide table with one column per year into long rows.

    ``AGE_GROUP, 2023, 2024`` becomes ``age_group, year, count``.  Columns
    whose header is not a four-digit year are ignored.

    Raises:
        DataLoadError: If no year columns or no id column can be found.
    """
    aliases = COLUMN_ALIASES.get(id_column, [id_column])
    id_col = _pick_column(raw, aliases)
    year_cols = [c for c in raw.columns if str(c).strip().isdigit() and len(str(c).strip()) == 4]
    if id_col is None or not year_cols:
        raise DataLoadError(
            f"Expected '{id_column}' plus year columns, got {list(raw.columns)}"
        )

    long = raw.melt(id_vars=[id_col], value_vars=year_cols,
                    var_name='year', value_name='count')
    long = long.rename(columns={id_col: id_column})
    long[id_column] = clean_text_series(long[id_column])
    long['year'] = coerce_int_series(long['year'])
    long['count'] = coerce_int_series(long['count'])
    return long.reset_index(drop=True)


def load_age_year_table(source: Source = CHART1_DATA_FILE,
                        data_dir: Optional[Source] = None) -> pd.DataFrame:
    """Load the wide age-group export as long ``age_group, year, count`` rows."""
    return melt_year_columns(read_csv(source, data_dir), 'age_group')


def load_jurisdiction_totals(source: Source = CHART1_DATA_FILE,
                             data_dir: Optional[Source] = None) -> pd.DataFrame:
    """Load a pre-aggregated ``JURISDICTION, Sum(COUNT)`` export.

    Returns:
        Normalised frame; only ``jurisdiction`` and ``count`` are meaningful.

    Raises:
        DataLoadError: If the export carries no jurisdiction column.
    """
    raw = read_csv(source, data_dir)
    if _pick_column(raw, COLUMN_ALIASES['jurisdiction']) is None:
        raise DataLoadError(f"No jurisdiction column in {source}: {list(raw.columns)}")
    return normalize_columns(raw)


def load_geojson(source: Source = GEOJSON_FILE,
                 data_dir: Optional[Source] = None) -> dict:
    """Load the state boundary FeatureCollection.

    Each feature gets an ``id`` equal to its lowercase state name (see
    jurisdictions.feature_name) so Plotly can key choropleth locations on it
    regardless of which name property the file uses.

    Raises:
        DataLoadError: On unreadable JSON or a collection without features.
    """
    text = read_source_text(source, data_dir)
    try:
        geo = json.loads(text)
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Cannot parse GeoJSON {source}: {e}") from e

    features = geo.get('features') if isinstance(geo, dict) else None
    if not features:
        raise DataLoadError(f"GeoJSON {source} has no features")

    for feature in features:
        feature['id'] = feature_name(feature)
    logger.info(f"Loaded {len(features)} GeoJSON features from {source}")
    return geo
