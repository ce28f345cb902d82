"""
Drug Testing Dashboard - Age Groups

Total tests vs positive detections per age group for 2023 and 2024.

PAGE LAYOUT
-----------
1. Grouped bar chart: light bars = total tests, solid bars = positives.
   Clicking a year's bar highlights that year and draws its trend line;
   clicking it again resets.
2. "Compare trends" button: both years' trend lines (earlier year dashed).
3. Info box with the selected year's totals.

The chart follows the jurisdiction and drug filters but not the year filter:
its two-year window is fixed.  When the main table carries no age groups,
the wide positives-only age export (Chart1Data.csv) is used instead.
"""

import logging

import streamlit as st

from drug_dashboard.analysis.chart_data import age_group_tests, age_group_positives
from drug_dashboard.core.config import AGE_CHART_YEARS
from drug_dashboard.dashboard.sidebar import render_sidebar
from drug_dashboard.dashboard.state import (
    cached_cleaned_data, cached_age_year_table, chart_key, data_dir, load_or_placeholder,
    sync_selection,
)
from drug_dashboard.data.loader import DataLoadError
from drug_dashboard.visualization.charts import chart_age_group_tests, COMPARE_TRENDS
from drug_dashboard.visualization.styles import info_box_html

logger = logging.getLogger(__name__)

st.title("Tests & Positives by Age Group")

df = load_or_placeholder(cached_cleaned_data, "Could not load cleanedData.csv for the age chart.")
filters = render_sidebar(df)

table = None
if df is not None:
    table = age_group_tests(filters.apply(df, use_years=False))
    if table.empty:
        try:
            table = age_group_positives(cached_age_year_table(data_dir()))
            st.caption("Showing positives from the pre-aggregated age export.")
        except DataLoadError as e:
            logger.warning(f"No age data in either source: {e}")

if table is not None:
    selection = sync_selection('age', fields=('customdata',))

    left, right = st.columns([4, 1])
    with right:
        comparing = selection.selected == COMPARE_TRENDS
        label = "Reset view" if comparing else f"Compare {AGE_CHART_YEARS[0]} & {AGE_CHART_YEARS[-1]} trends"
        if st.button(label, use_container_width=True):
            selection.toggle(COMPARE_TRENDS)
            st.rerun()

        if selection.panel_visible and selection.selected in AGE_CHART_YEARS:
            year_rows = table[table['year'] == selection.selected]
            tests = int(year_rows['total_tests'].sum())
            positives = int(year_rows['positive'].sum())
            rows = [("Positive tests", f"{positives:,}")]
            if tests:
                rows = [("Total tests", f"{tests:,}")] + rows + [
                    ("Positivity rate", f"{positives / tests * 100:.1f}%")
                ]
            st.markdown(info_box_html(str(selection.selected), rows), unsafe_allow_html=True)

    with left:
        fig = chart_age_group_tests(table, selection)
        st.plotly_chart(fig, use_container_width=True, key=chart_key('age'),
                        on_select="rerun", selection_mode="points")
