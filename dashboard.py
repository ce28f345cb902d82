"""
Drug Testing Dashboard Launcher

Serves the dashboard as a multi-page Streamlit app.

Usage:
    streamlit run dashboard.py --server.port 8501
    python run.py --port 8501
"""

import sys
from pathlib import Path

# Ensure the drug_dashboard package is importable without installation
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

import streamlit as st

# ============================================================================
# PAGE CONFIG
# ============================================================================
st.set_page_config(
    page_title="Roadside Drug Testing | Australia",
    page_icon="🚓",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ============================================================================
# NAVIGATION
# ============================================================================
app_dir = project_root / "drug_dashboard" / "dashboard"

pages = [
    st.Page(str(app_dir / "app.py"), title="Home", icon="🏠", default=True),
    st.Page(str(app_dir / "pages" / "age_groups.py"), title="Age Groups", icon="👥"),
    st.Page(str(app_dir / "pages" / "jurisdictions.py"), title="Jurisdictions", icon="📊"),
    st.Page(str(app_dir / "pages" / "detection_methods.py"), title="Detection Methods", icon="🧪"),
    st.Page(str(app_dir / "pages" / "locations.py"), title="Locations", icon="📍"),
    st.Page(str(app_dir / "pages" / "dominant_drug.py"), title="Dominant Drug", icon="🗺️"),
]

pg = st.navigation(pages)
pg.run()
