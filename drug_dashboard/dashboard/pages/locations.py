"""
Drug Testing Dashboard - Locations

A location dropdown drives two linked views:

1. Radar profile of every location (positives by default, totals on
   request); the chosen location's point is enlarged and recoloured.
2. Choropleth of tests per jurisdiction for the chosen location, or for all
   rows in "Overview".  States with no tests for that location fade out.
"""

import streamlit as st

from drug_dashboard.analysis.chart_data import (
    location_options, location_stats, jurisdiction_totals, is_overview,
)
from drug_dashboard.core.config import OVERVIEW_LABEL
from drug_dashboard.dashboard.sidebar import render_sidebar
from drug_dashboard.dashboard.state import (
    cached_cleaned_data, load_or_placeholder, load_optional_geojson,
)
from drug_dashboard.visualization.charts import chart_location_radar
from drug_dashboard.visualization.maps import chart_location_choropleth

METRICS = {'positive': 'Positive detections', 'total': 'All tests'}

st.title("Tests by Location")

df = load_or_placeholder(cached_cleaned_data, "Could not load cleanedData.csv for the location charts.")
filters = render_sidebar(df)

if df is not None:
    rows = filters.apply(df)

    top_left, top_right = st.columns([2, 1])
    with top_left:
        location = st.selectbox("Location", location_options(rows), key='location_select')
    with top_right:
        metric = st.radio("Radar metric", list(METRICS), format_func=METRICS.get,
                          horizontal=True, key='radar_metric')

    radar_col, map_col = st.columns(2)
    with radar_col:
        highlight = None if is_overview(location) else location
        st.plotly_chart(chart_location_radar(location_stats(rows), highlight, metric),
                        use_container_width=True)
    with map_col:
        geojson = load_optional_geojson()
        totals = jurisdiction_totals(rows, location)
        st.plotly_chart(chart_location_choropleth(geojson, totals, location or OVERVIEW_LABEL),
                        use_container_width=True)
