"""
Central Configuration Module for the Drug Testing Dashboard.

=== PURPOSE ===
This module is the single source of truth for every file name, column alias,
vocabulary, year window, palette and lookup table used across the dashboard.
Every other module imports from here rather than defining its own magic
values, which keeps the charts consistent with each other and lets the input
schema drift without scattered code changes.

=== DATA FLOW ===
  1. DATA_DIR / *_FILE name the CSV and GeoJSON sources.  DATA_DIR can be
     overridden with the DRUG_DASHBOARD_DATA_DIR environment variable.
  2. COLUMN_ALIASES maps every canonical column to the raw header spellings
     seen across the source CSV exports (YEAR/year, COUNT/Sum(COUNT), ...).
     The loader picks the first alias present.
  3. DRUG_COLUMNS, AGE_GROUP_ORDER and DETECTION_STAGES are the categorical
     vocabularies the charts group by.
  4. *_YEARS constants bound the time window of each chart.
  5. JURISDICTION_NAMES is the hand-maintained abbreviation -> GeoJSON name
     table used to join aggregated totals onto map features.
  6. Palettes (YEAR_COLORS, STAGE_COLORS, DRUG_COLORS, CHOROPLETH_*) feed the
     figure builders in drug_dashboard.visualization.
"""

import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# ==========================================
# DATA SOURCES
# ==========================================
# The project root is two levels up from this file:
#   drug_dashboard/core/config.py -> drug_dashboard/ -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Directory holding the CSV / GeoJSON inputs.  Deployments point this at a
# mounted volume through the environment instead of editing the code.
DATA_DIR = Path(os.environ.get('DRUG_DASHBOARD_DATA_DIR', PROJECT_ROOT / 'data'))

# Main row-level table (one row per jurisdiction/location/age/method group).
CLEANED_DATA_FILE = 'cleanedData.csv'

# Optional pre-aggregated table.  Depending on the export it is either a
# jurisdiction total table (JURISDICTION, Sum(COUNT)) or a wide age table
# (AGE_GROUP, 2023, 2024).
CHART1_DATA_FILE = 'Chart1Data.csv'

# State boundary polygons.
GEOJSON_FILE = 'australia_states.geojson'

# Timeout (seconds) for sources given as http(s) URLs.
HTTP_TIMEOUT = 15

# Where setup_logging() writes its timestamped log files.
LOG_DIR = PROJECT_ROOT / 'logs'

# ==========================================
# COLUMN NORMALIZATION
# ==========================================
# Canonical column -> raw header spellings, in priority order.  The source
# exports were produced by several tools over time, so the same field shows
# up as YEAR in one file, year in another and Sum(COUNT) in a pivot export.
COLUMN_ALIASES = {
    'year': ['year', 'YEAR'],
    'jurisdiction': ['jurisdiction', 'JURISDICTION', 'state', 'State'],
    'location': ['location', 'LOCATION'],
    'age_group': ['age_group', 'AGE_GROUP', 'ageGroup'],
    'detection_method': ['detection_method', 'DETECTION_METHOD', 'DETECTION', 'detection'],
    'best_detection_method': ['best_detection_method', 'BEST_DETECTION_METHOD', 'bestDetectionMethod'],
    'metric': ['metric', 'METRIC'],
    'start_date': ['start_date', 'START_DATE', 'startDate'],
    'end_date': ['end_date', 'END_DATE', 'endDate'],
    'count': ['count', 'COUNT', 'positive_count', 'POSITIVE_COUNT', 'Sum(COUNT)', 'total'],
    'no_drugs_detected': ['no_drugs_detected', 'NO_DRUGS_DETECTED', 'noDrugsDetected'],
    'fines': ['fines', 'FINES'],
    'arrests': ['arrests', 'ARRESTS'],
    'charges': ['charges', 'CHARGES'],
}

# Columns that are always coerced to integers (failures become 0).
NUMERIC_COLUMNS = ['year', 'count', 'no_drugs_detected', 'fines', 'arrests', 'charges']

# Free-text categorical columns that are trimmed during load.
TEXT_COLUMNS = ['jurisdiction', 'location', 'age_group', 'detection_method',
                'best_detection_method', 'metric', 'start_date', 'end_date']

# Minimum columns the row-level charts need after normalization.
REQUIRED_COLUMNS = ['year', 'jurisdiction', 'count']

# ==========================================
# DRUG VOCABULARY
# ==========================================
# Per-drug columns.  In the row-level export these hold Yes/No flags; in the
# summary export they hold percentages.  utils.is_detected() accepts both.
DRUG_COLUMNS = ['amphetamine', 'cannabis', 'cocaine', 'ecstasy',
                'methylamphetamine', 'other', 'unknown']

# Drugs shown on the dominant-drug map.  Order matters: on equal totals the
# later drug in this list wins.
ROADSIDE_DRUGS = ['amphetamine', 'cannabis', 'ecstasy', 'methylamphetamine']

# Tokens that mark a flag cell as "detected".
YES_TOKENS = {'yes', 'y', 'true', '1'}

# ==========================================
# AGE GROUPS
# ==========================================
AGE_GROUP_ORDER = ['0-16', '17-25', '26-39', '40-64', '65 and over', 'All ages', 'Unknown']

# Age group annotated with a "Low sample size" box on the age chart.
LOW_SAMPLE_AGE_GROUP = '0-16'

# ==========================================
# DETECTION STAGES
# ==========================================
STAGE_INDICATOR = 'Stage 1 - Indicator'
STAGE_CONFIRMATORY = 'Stage 2 - Confirmatory'
STAGE_LABORATORY = 'Stage 3 - Laboratory'
STAGE_OTHER = 'Other / NA'

DETECTION_STAGES = [STAGE_INDICATOR, STAGE_CONFIRMATORY, STAGE_LABORATORY]

# Substring rules evaluated in order against the lowercased detection method.
STAGE_KEYWORDS = [
    (STAGE_INDICATOR, ('indicator', 'stage 1')),
    (STAGE_CONFIRMATORY, ('confirm', 'stage 2')),
    (STAGE_LABORATORY, ('lab', 'toxicology', 'stage 3')),
]

# Layered chart: base fill opacity per stage so upper layers stay visible,
# and back-to-front draw order.
STAGE_OPACITY = {
    STAGE_INDICATOR: 0.35,
    STAGE_CONFIRMATORY: 0.72,
    STAGE_LABORATORY: 0.55,
}
LAYER_DRAW_ORDER = [STAGE_INDICATOR, STAGE_LABORATORY, STAGE_CONFIRMATORY]

# ==========================================
# YEAR WINDOWS
# ==========================================
AGE_CHART_YEARS = [2023, 2024]
DETECTION_YEAR_RANGE = (2008, 2024)
DOMINANT_DRUG_MIN_YEAR = 2021

# ==========================================
# LOCATIONS
# ==========================================
# Aggregate row in the location column; excluded from per-location charts.
ALL_REGIONS_LABEL = 'all regions'
OVERVIEW_LABEL = 'Overview'

# ==========================================
# JURISDICTIONS
# ==========================================
# Abbreviation -> lowercase GeoJSON STATE_NAME.  Total over all eight codes.
JURISDICTION_NAMES = {
    'nsw': 'new south wales',
    'vic': 'victoria',
    'qld': 'queensland',
    'wa': 'western australia',
    'sa': 'south australia',
    'tas': 'tasmania',
    'nt': 'northern territory',
    'act': 'australian capital territory',
}

# GeoJSON property names that may carry a state's name, in priority order.
FEATURE_NAME_PROPERTIES = ['STATE_NAME', 'STE_NAME16', 'name']

# Map view used when the bounds cannot be computed from the GeoJSON.
FALLBACK_MAP_CENTER = {'lon': 134.0, 'lat': -28.0}
FALLBACK_MAP_SCALE = 4.5

# ==========================================
# PALETTES
# ==========================================
YEAR_COLORS = {2023: '#4e79a7', 2024: '#f28e2b'}
YEAR_TOTAL_COLORS = {2023: 'rgba(78,121,167,0.3)', 2024: 'rgba(242,142,43,0.3)'}

STAGE_COLORS = {
    STAGE_INDICATOR: '#001f4d',
    STAGE_CONFIRMATORY: '#1F7A8C',
    STAGE_LABORATORY: '#F4A261',
}
STACKED_STAGE_COLORS = {
    STAGE_INDICATOR: '#00176B',
    STAGE_CONFIRMATORY: 'rgba(0, 23, 107, 0.65)',
    STAGE_LABORATORY: 'rgba(0, 23, 107, 0.3)',
}

DRUG_COLORS = {
    'amphetamine': '#4CAF50',
    'cannabis': '#FF7043',
    'ecstasy': '#42A5F5',
    'methylamphetamine': '#9C27B0',
}

PARETO_BAR_COLOR = '#00176B'
PARETO_LINE_COLOR = '#f59e0b'
METHOD_BAR_COLOR = '#f38b4f'
RADAR_COLOR = '#4e79a7'
RADAR_SELECTED_COLOR = '#ff6b35'
RADAR_POINT_SIZE = {'base': 12, 'selected': 20}

CHOROPLETH_LOW = '#e3f2fd'
CHOROPLETH_HIGH = '#00176B'
NO_DATA_FILL = '#f0f0f0'
GREYED_FILL = '#e0e0e0'
DEFAULT_STROKE = '#c9d3d9'
SELECTED_STROKE = '#333333'
MAP_STROKE = '#555555'
LABEL_COLOR = '#222222'
FADED_LABEL_COLOR = '#aaaaaa'

# ==========================================
# EMPHASIS
# ==========================================
# Opacities used by the selection state machine.  "base" is the resting
# value, "dimmed" applies to non-selected items while something is selected.
BAR_OPACITY = {'base': 0.9, 'selected': 1.0, 'dimmed': 0.35}
POINT_OPACITY = {'base': 1.0, 'selected': 1.0, 'dimmed': 0.4}
AGE_BAR_OPACITY = {'base': 1.0, 'selected': 1.0, 'dimmed': 0.3}
COMPARE_BAR_OPACITY = 0.25

# Spotlight rules for the location choropleth when a location is selected.
NO_DATA_OPACITY = 0.15
NO_DATA_LABEL_SIZE = 10
LABEL_SIZE = 12

# Fixed transition duration (ms) for figure updates.  Cosmetic only.
TRANSITION_MS = 500

# Placeholder notes shown under the dominant-drug map.
DOMINANT_DRUG_NOTE = (
    'Note: Data prior to 2021 and NT data (2023-2024) unavailable due to data '
    'quality issues. NSW confirmatory testing discontinued since Sept 2024.'
)
NO_DATA_HINT = '(Data prior to 2021 unavailable. NT data limited.)'
