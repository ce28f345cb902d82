"""
Dashboard module for the Drug Testing Dashboard.

Streamlit pages, the shared sidebar, cached loaders and per-chart selection state.
Page scripts under ``pages/`` are run by ``st.navigation`` (see dashboard.py at
the project root) and are not imported.
"""

from .selection import Emphasis, SelectionState, clicked_point

__all__ = [
    'Emphasis',
    'SelectionState',
    'clicked_point',
]
