"""
Drug Testing Dashboard - Detection Methods

PAGE LAYOUT
-----------
1. Stage highlight picker and two views of positive detections per testing
   stage, 2008-2024: layered areas and stacked areas.  Picking a stage (or
   clicking its area) highlights it on both views.
2. Bar chart of positives per raw detection method, ordered by the sidebar
   sort setting.  This one follows the year filter.
"""

import streamlit as st

from drug_dashboard.analysis.chart_data import stage_by_year, detection_method_totals
from drug_dashboard.core.config import DETECTION_STAGES
from drug_dashboard.dashboard.sidebar import render_sidebar
from drug_dashboard.dashboard.state import (
    cached_cleaned_data, chart_key, get_selection, load_or_placeholder, sync_selection,
)
from drug_dashboard.visualization.charts import (
    chart_detection_layered, chart_detection_stacked, chart_detection_methods,
)

ALL_STAGES = 'All stages'
STAGE_PICKER_KEY = 'stage_picker'


def _pick_stage():
    choice = st.session_state[STAGE_PICKER_KEY]
    selection = get_selection('stages')
    if choice == ALL_STAGES:
        selection.clear()
    elif selection.selected != choice:
        selection.toggle(choice)


st.title("Detection Methods")

df = load_or_placeholder(cached_cleaned_data, "Could not load cleanedData.csv for the detection charts.")
filters = render_sidebar(df)

if df is not None:
    wide = stage_by_year(filters.apply(df, use_years=False))

    selection = sync_selection('stages', fields=('customdata',))
    # Keep the picker in step with clicks on the chart.
    st.session_state[STAGE_PICKER_KEY] = selection.selected or ALL_STAGES
    st.radio("Highlight stage", [ALL_STAGES] + DETECTION_STAGES, key=STAGE_PICKER_KEY,
             on_change=_pick_stage, horizontal=True)

    layered_tab, stacked_tab = st.tabs(["Layered", "Stacked"])
    with layered_tab:
        st.plotly_chart(chart_detection_layered(wide, selection), use_container_width=True,
                        key=chart_key('stages'), on_select="rerun", selection_mode="points")
    with stacked_tab:
        st.plotly_chart(chart_detection_stacked(wide, selection), use_container_width=True)

    st.markdown("---")
    methods = detection_method_totals(filters.apply(df), ascending=filters.ascending)
    st.plotly_chart(chart_detection_methods(methods), use_container_width=True)
