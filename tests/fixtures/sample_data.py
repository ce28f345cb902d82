"""
Sample data fixtures for testing

This module provides small CSV exports and a GeoJSON collection that mimic
the police enforcement data, for use in unit tests.
"""

import io
import json
import tempfile
from pathlib import Path

import pandas as pd

from drug_dashboard.data.loader import normalize_columns


# Row-level export with the upper-case headers of the raw files.
# Row notes:
#   - "nsw" (lower case) and "NSW" must aggregate together on maps
#   - the blank-jurisdiction row must never reach a per-jurisdiction total
#   - the 2020 WA row is outside the dominant-drug window
SAMPLE_CSV = """\
YEAR,START_DATE,END_DATE,JURISDICTION,LOCATION,AGE_GROUP,METRIC,DETECTION_METHOD,BEST_DETECTION_METHOD,AMPHETAMINE,CANNABIS,COCAINE,ECSTASY,METHYLAMPHETAMINE,OTHER,UNKNOWN,COUNT,FINES,ARRESTS,CHARGES
2023,2023-01-01,2023-12-31,NSW,Major Cities of Australia,17-25,positive_drug_tests,Stage 1 - Indicator,Yes,No,Yes,No,No,No,No,No,10,2,1,0
2023,2023-01-01,2023-12-31,VIC,Inner Regional Australia,26-39,positive_drug_tests,Stage 2 - Confirmatory,Yes,No,No,No,No,Yes,No,No,5,0,0,1
2024,2024-01-01,2024-12-31,NSW,Major Cities of Australia,17-25,positive_drug_tests,Stage 3 - Laboratory,Yes,No,Yes,No,No,Yes,No,No,4,0,0,0
2024,2024-01-01,2024-12-31,QLD,Remote Australia,40-64,drug_tests,Indicator,No,No,No,No,No,No,No,No,20,0,0,0
2023,2023-01-01,2023-12-31,nsw,Inner Regional Australia,0-16,drug_tests,Stage 1 - Indicator,No,No,No,No,No,No,No,No,3,0,0,0
2020,2020-01-01,2020-12-31,WA,All regions,All ages,positive_drug_tests,Stage 1 - Indicator,Yes,Yes,No,No,No,No,No,No,7,0,0,0
2022,2022-01-01,2022-12-31,WA,Major Cities of Australia,26-39,positive_drug_tests,Stage 2 - Confirmatory,Yes,Yes,No,No,No,No,No,No,2,0,0,0
2023,2023-01-01,2023-12-31,,Major Cities of Australia,17-25,positive_drug_tests,Stage 1 - Indicator,Yes,No,Yes,No,No,No,No,No,100,0,0,0
"""

# Pre-aggregated Pareto export.
JURISDICTION_TOTALS_CSV = """\
JURISDICTION,Sum(COUNT)
NSW,60
VIC,25
QLD,15
TAS,0
"""

# Wide age export: one column per year.
AGE_YEAR_CSV = """\
AGE_GROUP,2023,2024
17-25,40,35
0-16,2,1
26-39,30,
"""

# Unit squares side by side, one per state.  Northern Territory has no rows
# in SAMPLE_CSV.
STATE_SQUARES = {
    'New South Wales': (150.0, -33.0),
    'Victoria': (144.0, -37.0),
    'Queensland': (145.0, -22.0),
    'Western Australia': (120.0, -26.0),
    'Northern Territory': (133.0, -19.0),
}


def _square(lon, lat, size=2.0):
    return [[
        [lon, lat], [lon + size, lat], [lon + size, lat + size], [lon, lat + size], [lon, lat],
    ]]


def create_sample_geojson():
    """
    Create a FeatureCollection of square "states".

    Returns:
        dict: GeoJSON with a ``STATE_NAME`` property per feature.
    """
    features = []
    for name, (lon, lat) in STATE_SQUARES.items():
        features.append({
            'type': 'Feature',
            'properties': {'STATE_NAME': name},
            'geometry': {'type': 'Polygon', 'coordinates': _square(lon, lat)},
        })
    return {'type': 'FeatureCollection', 'features': features}


def create_sample_rows():
    """
    Normalised row-level data, as returned by ``load_cleaned_data()``.

    Returns:
        pd.DataFrame: SAMPLE_CSV after column normalisation
    """
    raw = pd.read_csv(io.StringIO(SAMPLE_CSV), dtype=str)
    return normalize_columns(raw)


def create_sample_data_dir(output_dir=None):
    """
    Write every sample source into a directory for loader tests.

    Args:
        output_dir: Optional directory. If None, creates a temp directory.

    Returns:
        Path: Directory holding cleanedData.csv, Chart1Data.csv and
              australia_states.geojson
    """
    if output_dir is None:
        output_dir = tempfile.mkdtemp()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    (output_dir / 'cleanedData.csv').write_text(SAMPLE_CSV, encoding='utf-8')
    (output_dir / 'Chart1Data.csv').write_text(JURISDICTION_TOTALS_CSV, encoding='utf-8')
    (output_dir / 'australia_states.geojson').write_text(
        json.dumps(create_sample_geojson()), encoding='utf-8'
    )
    return output_dir
