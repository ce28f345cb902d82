"""
Reports module for the Drug Testing Dashboard.

Static export of the dashboard figures (HTML) and aggregated tables (Excel).
"""

from .export import (
    build_tables,
    build_figures,
    export_figures,
    write_summary_workbook,
    export_all,
)

__all__ = [
    'build_tables',
    'build_figures',
    'export_figures',
    'write_summary_workbook',
    'export_all',
]
