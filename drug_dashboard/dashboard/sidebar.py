"""
Drug Testing Dashboard - Shared Sidebar
=======================================

Renders the filter sidebar that appears on every page and returns the
current ``Filters``.  Pages apply them to the loaded frame with
``Filters.apply()``, which delegates to ``analysis.chart_data.filter_rows``.

Filters
-------
1. **Years**: multi-select, defaults to the newest year.  The last remaining
   year cannot be removed; clearing the widget restores the previous choice.
2. **Jurisdictions**: multi-select, empty means all.
3. **Drugs**: multi-select, empty means all; a row passes when any selected
   drug is flagged as detected.
4. **Sort**: descending / ascending order for the ranked bar charts.
5. **Reset**: restores every default and clears chart selections.

Charts with a fixed year window (age groups, detection stages, dominant
drug) ignore the year filter; pages opt out through ``Filters.apply``.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd
import streamlit as st

from ..analysis.chart_data import available_jurisdictions, available_years, filter_rows
from ..core.config import ROADSIDE_DRUGS
from ..data.jurisdictions import jurisdiction_label
from ..visualization.styles import inject_css
from .state import reset_selections

YEARS_KEY = 'sidebar_years'
JURISDICTIONS_KEY = 'sidebar_jurisdictions'
DRUGS_KEY = 'sidebar_drugs'
SORT_KEY = 'sidebar_sort'
_LAST_YEARS_KEY = 'sidebar_years_last'

SORT_OPTIONS = {'desc': 'Largest first', 'asc': 'Smallest first'}


@dataclass
class Filters:
    years: List[int] = field(default_factory=list)
    jurisdictions: List[str] = field(default_factory=list)
    drugs: List[str] = field(default_factory=list)
    sort: str = 'desc'

    @property
    def ascending(self) -> bool:
        return self.sort == 'asc'

    def apply(self, df: pd.DataFrame, use_years: bool = True, use_drugs: bool = True) -> pd.DataFrame:
        return filter_rows(
            df,
            years=self.years if use_years else None,
            jurisdictions=self.jurisdictions,
            drugs=self.drugs if use_drugs else None,
        )


def _keep_one_year():
    """on_change: refuse to leave the year filter empty."""
    if not st.session_state.get(YEARS_KEY):
        st.session_state[YEARS_KEY] = list(st.session_state.get(_LAST_YEARS_KEY, []))
    else:
        st.session_state[_LAST_YEARS_KEY] = list(st.session_state[YEARS_KEY])


def _reset(default_years: List[int]):
    """on_click for the Reset button."""
    st.session_state[YEARS_KEY] = list(default_years)
    st.session_state[_LAST_YEARS_KEY] = list(default_years)
    st.session_state[JURISDICTIONS_KEY] = []
    st.session_state[DRUGS_KEY] = []
    st.session_state[SORT_KEY] = 'desc'
    reset_selections()


def render_sidebar(df: Optional[pd.DataFrame]) -> Filters:
    """Render the sidebar widgets and return the active filters.

    Called at the top of every page.  With no data loaded (``df`` is None)
    only the heading is drawn and default Filters are returned.
    """
    inject_css()

    with st.sidebar:
        st.markdown("### Roadside Drug Testing")
        st.markdown("---")

        if df is None or df.empty:
            st.caption("No data loaded.")
            return Filters()

        years = available_years(df)
        default_years = years[:1]
        if YEARS_KEY not in st.session_state:
            st.session_state[YEARS_KEY] = list(default_years)
            st.session_state[_LAST_YEARS_KEY] = list(default_years)

        selected_years = st.multiselect(
            "Years", years, key=YEARS_KEY, on_change=_keep_one_year,
            help="At least one year stays selected.",
        )

        selected_jurisdictions = st.multiselect(
            "Jurisdictions", available_jurisdictions(df), key=JURISDICTIONS_KEY,
            format_func=jurisdiction_label, placeholder="All jurisdictions",
        )

        selected_drugs = st.multiselect(
            "Drugs", ROADSIDE_DRUGS, key=DRUGS_KEY,
            format_func=str.title, placeholder="All drugs",
        )

        sort = st.radio(
            "Sort order", list(SORT_OPTIONS), key=SORT_KEY,
            format_func=SORT_OPTIONS.get, horizontal=True,
        )

        st.button("Reset filters", on_click=_reset, args=(default_years,),
                  use_container_width=True)

    filters = Filters(
        years=[int(y) for y in selected_years],
        jurisdictions=list(selected_jurisdictions),
        drugs=list(selected_drugs),
        sort=sort or 'desc',
    )
    st.session_state['filters'] = filters
    return filters
