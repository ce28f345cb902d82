"""
Cached loaders and per-chart state for the Streamlit pages.

The loader functions in ``data/loader.py`` stay free of Streamlit so the CLI
exporter and the tests can call them directly; this module wraps them in
``st.cache_data`` and owns every ``st.session_state`` key the pages use.

Session state keys
------------------
``selection_<chart>``  SelectionState for one chart
``<chart>_chart``      widget key of the chart's ``st.plotly_chart``
``sidebar_*``          sidebar widgets (see sidebar.py)
"""

import logging
from typing import Callable, Optional

import pandas as pd
import streamlit as st

from ..core.config import (
    DATA_DIR, CLEANED_DATA_FILE, CHART1_DATA_FILE, GEOJSON_FILE,
    AGE_BAR_OPACITY,
)
from ..data.loader import (
    DataLoadError, load_cleaned_data, load_age_year_table, load_jurisdiction_totals,
    load_geojson,
)
from .selection import SelectionState, clicked_point

logger = logging.getLogger(__name__)

SELECTION_PREFIX = 'selection_'

# Per-chart emphasis settings passed to SelectionState.
CHART_SELECTIONS = {
    'age': dict(opacity=AGE_BAR_OPACITY),
    'pareto': {},
    'dominant': dict(stroke_color='#ffffff', selected_width=3.0),
}


# ============================================================================
# CACHED LOADERS
# ============================================================================

def data_dir() -> str:
    return str(st.session_state.get('data_dir', DATA_DIR))


@st.cache_data(show_spinner="Loading drug testing data...")
def cached_cleaned_data(directory: str) -> pd.DataFrame:
    return load_cleaned_data(CLEANED_DATA_FILE, directory)


@st.cache_data(show_spinner=False)
def cached_jurisdiction_totals(directory: str) -> pd.DataFrame:
    return load_jurisdiction_totals(CHART1_DATA_FILE, directory)


@st.cache_data(show_spinner=False)
def cached_age_year_table(directory: str) -> pd.DataFrame:
    return load_age_year_table(CHART1_DATA_FILE, directory)


@st.cache_data(show_spinner=False)
def cached_geojson(directory: str) -> dict:
    return load_geojson(GEOJSON_FILE, directory)


def load_or_placeholder(loader: Callable, message: str):
    """Call a cached loader, or render a placeholder and return None.

    A failed source only blanks the chart that needs it; the rest of the
    page keeps rendering.
    """
    try:
        return loader(data_dir())
    except DataLoadError as e:
        logger.error(f"{message}: {e}")
        st.markdown(f'<div class="chart-placeholder">{message}</div>', unsafe_allow_html=True)
        return None


def load_optional_geojson() -> Optional[dict]:
    """GeoJSON is optional: a missing file degrades the maps, it is not an error."""
    try:
        return cached_geojson(data_dir())
    except DataLoadError as e:
        logger.warning(f"GeoJSON unavailable, maps will show a placeholder: {e}")
        return None


# ============================================================================
# PER-CHART SELECTION
# ============================================================================

def get_selection(chart: str) -> SelectionState:
    """Return the chart's SelectionState, creating it on first use."""
    key = SELECTION_PREFIX + chart
    if key not in st.session_state:
        st.session_state[key] = SelectionState(chart, **CHART_SELECTIONS.get(chart, {}))
    return st.session_state[key]


def chart_key(chart: str) -> str:
    return f'{chart}_chart'


def sync_selection(chart: str, fields=('customdata', 'x')) -> SelectionState:
    """Feed the chart's current click (from its widget state) into its selection.

    Must run before the figure is built so the figure reflects the click that
    triggered this rerun.
    """
    selection = get_selection(chart)
    event = st.session_state.get(chart_key(chart))
    if selection.sync(clicked_point(event, fields)):
        logger.info(f"{chart} selection -> {selection.selected!r}")
    return selection


def reset_selections():
    """Clear every chart's selection (sidebar Reset button)."""
    for key in list(st.session_state.keys()):
        if key.startswith(SELECTION_PREFIX):
            st.session_state[key].clear()
