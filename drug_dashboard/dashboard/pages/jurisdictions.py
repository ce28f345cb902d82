"""
Drug Testing Dashboard - Jurisdictions

Pareto chart of positive drug tests per jurisdiction from the pre-aggregated
``JURISDICTION, Sum(COUNT)`` export.  Clicking a bar highlights it and opens
an info box with its total and cumulative share; clicking it again resets.
Only the jurisdiction filter applies: the export has no year or drug columns.
"""

import streamlit as st

from drug_dashboard.analysis.chart_data import jurisdiction_pareto
from drug_dashboard.dashboard.sidebar import render_sidebar
from drug_dashboard.dashboard.state import (
    cached_cleaned_data, cached_jurisdiction_totals, chart_key, data_dir, sync_selection,
    load_or_placeholder,
)
from drug_dashboard.data.loader import DataLoadError
from drug_dashboard.visualization.charts import chart_jurisdiction_pareto
from drug_dashboard.visualization.styles import info_box_html

st.title("Positive Tests by Jurisdiction")

# The sidebar is built from the row-level table so every page shares its options.
try:
    sidebar_df = cached_cleaned_data(data_dir())
except DataLoadError:
    sidebar_df = None
filters = render_sidebar(sidebar_df)

totals = load_or_placeholder(cached_jurisdiction_totals,
                             "Could not load Chart1Data.csv for the jurisdiction chart.")

if totals is not None:
    table = jurisdiction_pareto(filters.apply(totals, use_years=False, use_drugs=False))
    selection = sync_selection('pareto')

    left, right = st.columns([4, 1])
    with left:
        fig = chart_jurisdiction_pareto(table, selection)
        st.plotly_chart(fig, use_container_width=True, key=chart_key('pareto'),
                        on_select="rerun", selection_mode="points")

    with right:
        if selection.panel_visible:
            match = table[table['jurisdiction'] == selection.selected]
            if not match.empty:
                row = match.iloc[0]
                share = row['total'] / table['total'].sum() * 100
                st.markdown(info_box_html(row['label'], [
                    ("Positive tests", f"{int(row['total']):,}"),
                    ("Share", f"{share:.1f}%"),
                    ("Cumulative", f"{row['cum_pct']:.1f}%"),
                ]), unsafe_allow_html=True)
        else:
            st.caption("Click a bar to see its share of all positive tests.")
