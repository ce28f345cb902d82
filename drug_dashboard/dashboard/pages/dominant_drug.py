"""
Drug Testing Dashboard - Dominant Drug

Map of the most detected roadside drug per jurisdiction (2021 onwards, best
detection method only).  Clicking a state greys the others, outlines it and
opens a detail panel with its total and per-drug shares; a state without
data opens the no-data panel instead.  Clicking it again resets the map.
"""

import streamlit as st

from drug_dashboard.analysis.chart_data import dominant_drugs
from drug_dashboard.core.config import DOMINANT_DRUG_NOTE, NO_DATA_HINT, DRUG_COLORS, ROADSIDE_DRUGS
from drug_dashboard.dashboard.sidebar import render_sidebar
from drug_dashboard.dashboard.state import (
    cached_cleaned_data, chart_key, load_or_placeholder, load_optional_geojson, sync_selection,
)
from drug_dashboard.visualization.maps import chart_dominant_drug_map
from drug_dashboard.visualization.styles import detail_panel_html

st.title("Most Detected Drug by Jurisdiction")

df = load_or_placeholder(cached_cleaned_data, "Could not load cleanedData.csv for the drug map.")
filters = render_sidebar(df)

if df is not None:
    geojson = load_optional_geojson()
    table = dominant_drugs(filters.apply(df, use_years=False))
    selection = sync_selection('dominant', fields=('customdata', 'location'))

    map_col, panel_col = st.columns([3, 1])
    with map_col:
        st.plotly_chart(chart_dominant_drug_map(geojson, table, selection),
                        use_container_width=True, key=chart_key('dominant'),
                        on_select="rerun", selection_mode="points")
        st.markdown(f'<p class="chart-note">{DOMINANT_DRUG_NOTE}</p>', unsafe_allow_html=True)

    with panel_col:
        if selection.panel_visible:
            state = selection.selected
            title = str(state).title()
            if state in table.index and table.loc[state, 'total'] > 0:
                row = table.loc[state]
                shares = [(drug, row[f'{drug}_pct']) for drug in ROADSIDE_DRUGS]
                html = detail_panel_html(title, int(row['total']), shares, DRUG_COLORS)
            else:
                html = detail_panel_html(title, None, [], DRUG_COLORS, note=NO_DATA_HINT)
            st.markdown(html, unsafe_allow_html=True)
        else:
            st.caption("Click a state for its drug breakdown.")
