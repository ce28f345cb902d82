"""
Drug Testing Dashboard - interactive views of Australian roadside drug testing.

This package provides:
- Loading and normalisation of the police enforcement CSV exports and the
  state boundary GeoJSON
- Per-chart aggregation (age groups, jurisdictions, detection stages,
  locations, dominant drug)
- Plotly figure builders and choropleth colour scales
- A multi-page Streamlit dashboard with click-to-highlight selection
- Static HTML / Excel export
"""

__version__ = "1.0.0"
__author__ = "Drug Testing Dashboard Team"

from .core.config import *
from .core.utils import clean_text, validate_columns, setup_logging

from .data import DataLoadError, load_cleaned_data, load_jurisdiction_totals, load_geojson
from .analysis import group_sum, totals_by, pareto_table
from .reports import export_all
