"""
Drug Testing Dashboard - Styles & Theme Configuration
=====================================================

Visual constants shared by every figure and page.  Data palettes (year, stage,
drug and choropleth colours) live in ``core/config.py`` next to the
vocabularies they colour; this module owns the *presentation* layer: the
Plotly layout theme, axis styling, the CSS injected into Streamlit, and the
small HTML fragments used for info boxes and detail panels.

Theme
-----
The charts use a light theme: white paper, dark slate text and pale grid
lines.  The map figures drop axes entirely and use a white land background
so that the "no data" fill (``#f0f0f0``) stays distinguishable from the
lowest value on the colour scale (``#e3f2fd``).

Module Contents at a Glance
----------------------------
- ``get_plotly_theme()`` / ``AXIS_STYLE`` -- Plotly chart theming
- ``get_transition()`` -- fixed-duration layout transition
- ``info_box_html()`` / ``detail_panel_html()`` -- HTML fragments
- ``inject_css()`` -- injects the stylesheet into Streamlit
"""

import html

import streamlit as st

from ..core.config import TRANSITION_MS

# ============================================================================
# TEXT COLORS
# ============================================================================

TEXT_COLOR = '#1f2937'
MUTED_TEXT_COLOR = '#64748b'
GRID_COLOR = '#e5e7eb'
REFERENCE_LINE_COLOR = '#94a3b8'


# ============================================================================
# PLOTLY THEME
# ============================================================================

def get_plotly_theme() -> dict:
    """Return a base Plotly layout configuration for the dashboard theme.

    Unpack into ``fig.update_layout(**get_plotly_theme())``.

    Returns
    -------
    dict
        Plotly layout keyword arguments: white background, Inter font,
        compact margins and a horizontal legend above the plot area.
    """
    return dict(
        paper_bgcolor='#ffffff',
        plot_bgcolor='#ffffff',
        font=dict(family='Inter, sans-serif', color=TEXT_COLOR, size=12),
        margin=dict(l=50, r=40, t=60, b=50),
        legend=dict(orientation='h', yanchor='bottom', y=1.02, xanchor='right', x=1),
        hoverlabel=dict(bgcolor='rgba(255,255,255,0.95)', bordercolor='#333333',
                        font=dict(color=TEXT_COLOR, size=12)),
    )


# Apply with fig.update_xaxes(**AXIS_STYLE) / fig.update_yaxes(**AXIS_STYLE)
AXIS_STYLE = dict(
    gridcolor=GRID_COLOR,
    zerolinecolor=GRID_COLOR,
    linecolor='#cbd5e1',
)


def get_transition() -> dict:
    """Layout transition used when a figure is redrawn after a click."""
    return dict(duration=TRANSITION_MS, easing='cubic-in-out')


# ============================================================================
# HTML FRAGMENTS
# ============================================================================

def info_box_html(title: str, rows) -> str:
    """Build the small info box shown beside a chart after a click.

    Parameters
    ----------
    title : str
        Bold heading, e.g. ``"NSW - New South Wales"``.
    rows : iterable of (str, str)
        Label / value pairs rendered one per line.

    Returns
    -------
    str
        HTML for ``st.markdown(..., unsafe_allow_html=True)``.
    """
    lines = ''.join(
        f'<div class="info-row"><span class="info-label">{html.escape(str(label))}</span>'
        f'<span class="info-value">{html.escape(str(value))}</span></div>'
        for label, value in rows
    )
    return f'<div class="info-box"><div class="info-title">{html.escape(title)}</div>{lines}</div>'


def detail_panel_html(title: str, total, shares, colors, note: str = "") -> str:
    """Detail panel for the dominant-drug map.

    ``shares`` is an ordered list of ``(drug, pct)`` tuples; each row gets a
    colour swatch from ``colors``.  ``total`` of None renders the no-data
    variant with ``note`` as the hint.
    """
    if total is None:
        return (
            f'<div class="detail-panel"><div class="info-title">{html.escape(title)}</div>'
            f'<div class="info-row">No data available</div>'
            f'<div class="panel-note">{html.escape(note)}</div></div>'
        )
    items = ''.join(
        f'<div class="info-row"><span class="swatch" style="background:{colors.get(drug, "#cccccc")}"></span>'
        f'<span class="info-label">{html.escape(drug.title())}</span>'
        f'<span class="info-value">{pct:.1f}%</span></div>'
        for drug, pct in shares
    )
    return (
        f'<div class="detail-panel"><div class="info-title">{html.escape(title)}</div>'
        f'<div class="info-row"><span class="info-label">Total positives</span>'
        f'<span class="info-value">{total:,}</span></div>{items}</div>'
    )


# ============================================================================
# CSS INJECTION
# ============================================================================

def inject_css():
    """Inject the dashboard stylesheet into the Streamlit app.

    Call once at the top of the entry script, before any content renders.
    Covers the info box / detail panel fragments above, the chart note text
    and hides the default Streamlit chrome.
    """
    st.markdown("""
<style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;600;700&display=swap');

    .stApp { font-family: 'Inter', sans-serif; }
    .stPlotlyChart { min-height: 420px !important; }

    /* Info box beside the Pareto / age charts */
    .info-box, .detail-panel {
        background: rgba(255, 255, 255, 0.95);
        border: 2px solid #333333;
        border-radius: 6px;
        padding: 10px 12px;
        font-size: 0.85rem;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.2);
        margin: 8px 0;
    }
    .info-title { font-weight: 700; margin-bottom: 6px; }
    .info-row { display: flex; align-items: center; gap: 8px; padding: 2px 0; }
    .info-label { flex: 1; color: #64748b; }
    .info-value { font-weight: 600; color: #1f2937; }
    .swatch { width: 12px; height: 12px; border-radius: 2px; display: inline-block; }
    .panel-note { margin-top: 6px; font-size: 0.75rem; color: #64748b; font-style: italic; }

    /* Footnote under the maps */
    .chart-note { font-size: 0.75rem; color: #64748b; margin-top: -8px; }

    /* Placeholder when a source failed to load */
    .chart-placeholder {
        border: 1px dashed #cbd5e1;
        border-radius: 6px;
        padding: 40px 16px;
        text-align: center;
        color: #64748b;
    }

    #MainMenu { visibility: hidden; }
    footer { visibility: hidden; }
</style>
""", unsafe_allow_html=True)
