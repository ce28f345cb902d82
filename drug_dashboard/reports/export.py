"""
Drug Testing Dashboard - Static Export
======================================

Renders every dashboard figure to a standalone HTML file and writes the
aggregated tables behind them to one Excel workbook, for sharing results
without running the Streamlit server.

Output layout (``run.py --export DIR``)::

    DIR/
      age_groups.html
      jurisdictions.html
      detection_layered.html
      detection_stacked.html
      detection_methods.html
      location_radar.html
      location_map.html
      dominant_drug.html
      summary.xlsx

Figures are exported in their unselected state.  A figure whose source fails
to load is skipped with a warning; only a missing cleanedData.csv aborts.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
import plotly.graph_objects as go
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from tqdm import tqdm

from ..analysis.chart_data import (
    age_group_tests, jurisdiction_pareto, stage_by_year, detection_method_totals,
    location_stats, jurisdiction_totals, dominant_drugs,
)
from ..core.config import OVERVIEW_LABEL
from ..data.loader import (
    DataLoadError, load_cleaned_data, load_jurisdiction_totals, load_geojson,
)
from ..visualization.charts import (
    chart_age_group_tests, chart_jurisdiction_pareto, chart_detection_layered,
    chart_detection_stacked, chart_detection_methods, chart_location_radar,
)
from ..visualization.maps import chart_location_choropleth, chart_dominant_drug_map

logger = logging.getLogger(__name__)

SUMMARY_WORKBOOK = 'summary.xlsx'

HEADER_FONT_COLOR = "FFFFFF"
HEADER_FILL_COLOR = "004C97"
MAX_COLUMN_WIDTH = 50


# ============================================================================
# TABLES
# ============================================================================

def build_tables(df: pd.DataFrame,
                 totals: Optional[pd.DataFrame] = None) -> Dict[str, pd.DataFrame]:
    """Aggregated tables for every chart, flattened for spreadsheet output.

    Args:
        df: Normalised rows from ``load_cleaned_data()``.
        totals: Optional pre-aggregated jurisdiction export.  When None the
            Pareto table is computed from positive rows of ``df``.

    Returns:
        Ordered ``{sheet name: frame}``; sheet names fit Excel's 31-char limit.
    """
    if totals is None:
        totals = df[df['best_detection_method'] == 'yes']

    stages = stage_by_year(df)
    stages.index.name = 'year'
    stages.columns.name = None
    stages = stages.reset_index()

    return {
        'Age Groups': age_group_tests(df),
        'Jurisdictions': jurisdiction_pareto(totals),
        'Detection Stages': stages,
        'Detection Methods': detection_method_totals(df),
        'Locations': location_stats(df),
        'Dominant Drug': dominant_drugs(df).reset_index(),
    }


# ============================================================================
# FIGURES
# ============================================================================

def build_figures(tables: Dict[str, pd.DataFrame], df: pd.DataFrame,
                  geojson: Optional[dict] = None) -> Dict[str, go.Figure]:
    """One figure per exported file, keyed by file stem."""
    wide = tables['Detection Stages'].set_index('year')
    overview = jurisdiction_totals(df, OVERVIEW_LABEL)
    return {
        'age_groups': chart_age_group_tests(tables['Age Groups']),
        'jurisdictions': chart_jurisdiction_pareto(tables['Jurisdictions']),
        'detection_layered': chart_detection_layered(wide),
        'detection_stacked': chart_detection_stacked(wide),
        'detection_methods': chart_detection_methods(tables['Detection Methods']),
        'location_radar': chart_location_radar(tables['Locations']),
        'location_map': chart_location_choropleth(geojson, overview, OVERVIEW_LABEL),
        'dominant_drug': chart_dominant_drug_map(
            geojson, tables['Dominant Drug'].set_index('jurisdiction_name')
        ),
    }


def export_figures(figures: Dict[str, go.Figure], out_dir) -> list:
    """Write each figure to ``<out_dir>/<name>.html`` (plotly.js from CDN).

    Returns:
        Paths written, in ``figures`` order.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for name, fig in tqdm(figures.items(), desc="Exporting figures", unit="fig"):
        path = out_dir / f"{name}.html"
        fig.write_html(str(path), include_plotlyjs='cdn')
        written.append(path)
    logger.info(f"Wrote {len(written)} figures to {out_dir}")
    return written


# ============================================================================
# WORKBOOK
# ============================================================================

def _format_sheet(ws, frame: pd.DataFrame):
    """Navy header row, bold white text, widths sized to content."""
    header_font = Font(bold=True, color=HEADER_FONT_COLOR)
    header_fill = PatternFill(start_color=HEADER_FILL_COLOR, end_color=HEADER_FILL_COLOR,
                              fill_type="solid")
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill

    for idx, column in enumerate(frame.columns, start=1):
        values = frame[column].astype(str)
        longest = max([len(str(column))] + values.str.len().tolist())
        ws.column_dimensions[get_column_letter(idx)].width = min(longest + 2, MAX_COLUMN_WIDTH)

    ws.freeze_panes = 'A2'


def write_summary_workbook(tables: Dict[str, pd.DataFrame], path) -> Path:
    """Write one formatted sheet per table.

    Args:
        tables: ``{sheet name: frame}`` as returned by ``build_tables()``.
        path: Destination ``.xlsx`` file; parent directories are created.

    Returns:
        The workbook path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(path, engine='openpyxl') as writer:
        for sheet_name, frame in tables.items():
            frame.to_excel(writer, sheet_name=sheet_name, index=False)
            _format_sheet(writer.sheets[sheet_name], frame)

    logger.info(f"Wrote summary workbook with {len(tables)} sheets to {path}")
    return path


# ============================================================================
# ENTRY POINT
# ============================================================================

def export_all(out_dir, data_dir=None) -> Dict[str, object]:
    """Load the sources, then write every figure and the summary workbook.

    Raises:
        DataLoadError: If cleanedData.csv cannot be loaded.
    """
    df = load_cleaned_data(data_dir=data_dir)

    try:
        totals = load_jurisdiction_totals(data_dir=data_dir)
    except DataLoadError as e:
        logger.warning(f"Jurisdiction export unavailable, using row-level data: {e}")
        totals = None

    try:
        geojson = load_geojson(data_dir=data_dir)
    except DataLoadError as e:
        logger.warning(f"Maps will be exported as placeholders: {e}")
        geojson = None

    tables = build_tables(df, totals)
    figures = build_figures(tables, df, geojson)
    return {
        'figures': export_figures(figures, out_dir),
        'workbook': write_summary_workbook(tables, Path(out_dir) / SUMMARY_WORKBOOK),
    }
