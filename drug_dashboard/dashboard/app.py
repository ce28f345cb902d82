"""
Drug Testing Dashboard - Home

Landing page: headline numbers for the current filters and a short guide to
the chart pages.
"""

import streamlit as st

from drug_dashboard.dashboard.sidebar import render_sidebar
from drug_dashboard.dashboard.state import cached_cleaned_data, load_or_placeholder
from drug_dashboard.analysis.chart_data import available_jurisdictions

st.title("Roadside Drug Testing in Australia")
st.caption("Police enforcement data on roadside drug tests, by jurisdiction, age group, "
           "location and detection method.")

df = load_or_placeholder(cached_cleaned_data, "Could not load cleanedData.csv.")
filters = render_sidebar(df)

if df is not None:
    rows = filters.apply(df)
    positives = rows[rows['best_detection_method'] == 'yes']['count'].sum()
    tests = rows['count'].sum()

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Tests", f"{int(tests):,}")
    c2.metric("Positive (best method)", f"{int(positives):,}")
    c3.metric("Positivity rate", f"{positives / tests * 100:.1f}%" if tests else "n/a")
    c4.metric("Jurisdictions", len(available_jurisdictions(rows)))

    st.markdown("---")
    st.markdown("""
**Pages**

- **Age Groups**: total tests vs positives per age group (2023-2024); click a year to see its trend.
- **Jurisdictions**: Pareto of positive tests; click a bar for its share.
- **Detection Methods**: positives per testing stage over time, and per raw method.
- **Locations**: radar profile across locations and a map of where tests happened.
- **Dominant Drug**: most detected drug per state since 2021; click a state for the breakdown.
""")
