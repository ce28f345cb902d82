"""
Drug Testing Dashboard - Chart Library
======================================

Figure builders for every non-map chart.  Each public ``chart_*`` function
takes an aggregated table from ``analysis/chart_data.py`` (never raw rows)
plus, for interactive charts, the chart's ``SelectionState``, and returns a
``plotly.graph_objects.Figure`` that the pages render with
``st.plotly_chart(..., on_select="rerun")`` and the exporter writes to HTML.

Conventions
-----------
* ``_apply_theme()`` applies the shared layout dict and axis grid style.
* Selection never removes elements: unselected items are dimmed through
  ``SelectionState.emphasis()`` so toggling twice restores the resting look.
* Clickable traces carry the item key in ``customdata[0]`` so pages can read
  it back from ``event.selection.points``.
* An empty table produces ``no_data_figure()`` with an explicit message
  instead of an empty plot.

Plotly patterns used
--------------------
* ``go.Bar`` with numeric x positions and ``width`` for grouped bars whose
  trend line has to sit exactly on the bar centres (age chart).
* ``make_subplots(specs=[[{"secondary_y": True}]])`` for the Pareto chart.
* ``go.Scatter(fill='tozeroy')`` for the layered area chart and
  ``stackgroup`` for the stacked one.
* ``go.Scatterpolar`` for the radar chart.
"""

import logging
from typing import Optional, Sequence

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from ..core.config import (
    AGE_CHART_YEARS, YEAR_COLORS, YEAR_TOTAL_COLORS, LOW_SAMPLE_AGE_GROUP,
    AGE_BAR_OPACITY, COMPARE_BAR_OPACITY, POINT_OPACITY,
    PARETO_BAR_COLOR, PARETO_LINE_COLOR, METHOD_BAR_COLOR,
    DETECTION_STAGES, LAYER_DRAW_ORDER, STAGE_COLORS, STACKED_STAGE_COLORS, STAGE_OPACITY,
    RADAR_COLOR, RADAR_SELECTED_COLOR, RADAR_POINT_SIZE,
)
from .color_scale import with_alpha
from .styles import get_plotly_theme, get_transition, AXIS_STYLE, MUTED_TEXT_COLOR, REFERENCE_LINE_COLOR

logger = logging.getLogger(__name__)

# Selection item for the age chart's "Compare trends" toggle.
COMPARE_TRENDS = 'compare'

# Half-width of a year slot inside an age-group band.
_AGE_SLOT = 0.2
_AGE_BAR_WIDTH = 0.38


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _apply_theme(fig: go.Figure) -> go.Figure:
    """Apply the shared layout theme and axis grid styling to *fig*."""
    fig.update_layout(**get_plotly_theme())
    fig.update_xaxes(**AXIS_STYLE)
    fig.update_yaxes(**AXIS_STYLE)
    return fig


def _selected(selection):
    return selection.selected if selection is not None else None


def no_data_figure(title: str, message: str = 'No data available', height: int = 420) -> go.Figure:
    """Empty figure with a centred message, axes hidden."""
    fig = go.Figure()
    _apply_theme(fig)
    fig.update_layout(
        title=title,
        height=height,
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        annotations=[dict(text=message, x=0.5, y=0.5, xref='paper', yref='paper',
                          showarrow=False, font=dict(size=14, color=MUTED_TEXT_COLOR))],
    )
    return fig


# ============================================================================
# AGE GROUP BARS (total tests vs positives)
# ============================================================================

def chart_age_group_tests(table: pd.DataFrame, selection=None,
                          years: Sequence[int] = AGE_CHART_YEARS) -> go.Figure:
    """Grouped bars of total tests and positive detections per age group.

    For every year a light bar (total tests) sits behind a solid bar
    (positives) in the same slot.  The selection item is either a year or
    ``COMPARE_TRENDS``:

    * year selected: that year's positive bars stay opaque, the others drop to
      0.3, and a trend line through that year's positives is drawn.
    * compare: every positive bar drops to 0.25 and both trend lines are
      drawn, the earlier year dashed.

    The ``LOW_SAMPLE_AGE_GROUP`` band gets a red "Low sample size" box.

    Parameters
    ----------
    table : pd.DataFrame
        Output of ``age_group_tests()`` / ``age_group_positives()``.
    selection : SelectionState, optional
        The age chart's selection.
    years : sequence of int
        Year slots, left to right inside each age band.

    Returns
    -------
    go.Figure
    """
    title = f'Drug Tests vs. Positive Detections by Age Group ({years[0]}–{years[-1]})'
    if table.empty:
        return no_data_figure(title)

    groups = list(dict.fromkeys(table['age_group']))
    position = {g: i for i, g in enumerate(groups)}
    offsets = {
        year: (i - (len(years) - 1) / 2) * 2 * _AGE_SLOT for i, year in enumerate(years)
    }
    selected = _selected(selection)
    comparing = selected == COMPARE_TRENDS
    show_totals = table['total_tests'].sum() > 0

    hover = '<b>Year:</b> %{customdata[0]}<br><b>Age Group:</b> %{customdata[1]}<br>'
    if show_totals:
        hover += '<b>Total Tests:</b> %{customdata[2]:,}<br>'
    hover += '<b>Positive Tests:</b> %{y:,}<br>'
    if show_totals:
        hover += '<b>Positivity Rate:</b> %{customdata[3]:.1f}%'
    hover += '<extra></extra>'
    total_hover = ('<b>Year:</b> %{customdata[0]}<br><b>Age Group:</b> %{customdata[1]}<br>'
                   '<b>Total Tests:</b> %{y:,}<extra></extra>')

    fig = go.Figure()

    for year in years:
        rows = table[table['year'] == year]
        x = [position[g] + offsets[year] for g in rows['age_group']]
        customdata = [
            [year, g, t, r] for g, t, r in zip(rows['age_group'], rows['total_tests'], rows['rate'])
        ]

        # Total bars carry the same customdata so a click on them selects the year.
        if show_totals:
            fig.add_trace(go.Bar(
                x=x, y=rows['total_tests'], width=_AGE_BAR_WIDTH,
                name=f'{year}: Total tests conducted',
                marker=dict(color=YEAR_TOTAL_COLORS.get(year, 'rgba(148,163,184,0.3)')),
                customdata=customdata,
                hovertemplate=total_hover,
                legendgroup=f'total-{year}',
            ))

        if comparing:
            opacity = COMPARE_BAR_OPACITY
        elif selected is None or selected == year:
            opacity = AGE_BAR_OPACITY['base']
        else:
            opacity = AGE_BAR_OPACITY['dimmed']

        fig.add_trace(go.Bar(
            x=x, y=rows['positive'], width=_AGE_BAR_WIDTH,
            name=f'{year}: Positive drug tests',
            marker=dict(color=YEAR_COLORS.get(year, PARETO_BAR_COLOR)),
            opacity=opacity,
            customdata=customdata,
            hovertemplate=hover,
            legendgroup=f'positive-{year}',
        ))

    trend_years = []
    if comparing:
        trend_years = list(years)
    elif selected in years:
        trend_years = [selected]

    for i, year in enumerate(trend_years):
        rows = table[table['year'] == year]
        dashed = comparing and i == 0 and len(trend_years) > 1
        fig.add_trace(go.Scatter(
            x=[position[g] + offsets[year] for g in rows['age_group']],
            y=rows['positive'],
            mode='lines+markers',
            name=f'{year} trend',
            line=dict(color=YEAR_COLORS.get(year, PARETO_BAR_COLOR), width=2.5,
                      shape='spline', dash='dash' if dashed else 'solid'),
            marker=dict(size=9, color=YEAR_COLORS.get(year, PARETO_BAR_COLOR),
                        line=dict(color='#ffffff', width=1.5)),
            customdata=[[year, g] for g in rows['age_group']],
            hovertemplate=(
                '<b>Year:</b> %{customdata[0]}<br><b>Age Group:</b> %{customdata[1]}<br>'
                '<b>Positive Tests:</b> %{y:,}<extra></extra>'
            ),
        ))

    if LOW_SAMPLE_AGE_GROUP in position:
        center = position[LOW_SAMPLE_AGE_GROUP]
        low_rows = table[table['age_group'] == LOW_SAMPLE_AGE_GROUP]
        peak = low_rows['positive'].max() if not low_rows.empty else 0
        fig.add_shape(
            type='rect', xref='x', yref='y',
            x0=center - 0.45, x1=center + 0.45, y0=0, y1=peak * 1.15 + 1,
            line=dict(color='red', width=1.5), fillcolor='rgba(255,0,0,0.08)',
            layer='above',
        )
        fig.add_annotation(
            x=center, y=peak * 1.15 + 1, text='<b>Low sample size</b>',
            showarrow=False, yshift=12, font=dict(color='red', size=12),
        )

    _apply_theme(fig)
    fig.update_layout(
        title=title,
        barmode='overlay',
        height=500,
        transition=get_transition(),
        clickmode='event+select',
        legend=dict(orientation='h', yanchor='top', y=-0.12, xanchor='center', x=0.5),
    )
    fig.update_xaxes(tickmode='array', tickvals=list(range(len(groups))), ticktext=groups,
                     title_text='Age Group')
    fig.update_yaxes(title_text='Number of Tests', rangemode='tozero')
    return fig


# ============================================================================
# JURISDICTION PARETO
# ============================================================================

def chart_jurisdiction_pareto(table: pd.DataFrame, selection=None) -> go.Figure:
    """Pareto chart of positive tests per jurisdiction.

    Bars sorted descending on the primary axis, cumulative percentage on the
    secondary axis (0-105) with an 80 % reference line.  When a jurisdiction
    is selected the other bars fade to 0.35 and the other line markers to
    0.4; the selected bar gets a dark outline.

    Parameters
    ----------
    table : pd.DataFrame
        Output of ``jurisdiction_pareto()``: ``jurisdiction, total, cum_pct,
        label, name``.
    selection : SelectionState, optional
        Keyed on the raw ``jurisdiction`` value.

    Returns
    -------
    go.Figure
        Dual-axis 450px chart, or a no-data figure when the table is empty.
    """
    title = 'Positive Drug Tests by Jurisdiction (Pareto)'
    if table.empty:
        return no_data_figure(title)

    keys = table['jurisdiction'].tolist()
    if selection is not None:
        emphasis = [selection.emphasis(k) for k in keys]
        bar_opacity = [e.opacity for e in emphasis]
        line_colors = [e.stroke_color for e in emphasis]
        line_widths = [e.stroke_width if e.selected else 0 for e in emphasis]
        point_opacity = [
            POINT_OPACITY['dimmed'] if e.greyed else POINT_OPACITY['base'] for e in emphasis
        ]
    else:
        bar_opacity = [1.0] * len(keys)
        line_colors = ['#ffffff'] * len(keys)
        line_widths = [0] * len(keys)
        point_opacity = [1.0] * len(keys)

    customdata = [[k, lbl, pct] for k, lbl, pct in zip(keys, table['label'], table['cum_pct'])]

    fig = make_subplots(specs=[[{"secondary_y": True}]])
    fig.add_trace(
        go.Bar(
            x=keys, y=table['total'], name='Positive tests',
            marker=dict(color=PARETO_BAR_COLOR, opacity=bar_opacity,
                        line=dict(color=line_colors, width=line_widths)),
            customdata=customdata,
            hovertemplate=(
                '<b>%{customdata[1]}</b><br>Positive tests: %{y:,}<br>'
                'Cumulative: %{customdata[2]:.1f}%<extra></extra>'
            ),
        ),
        secondary_y=False,
    )
    fig.add_trace(
        go.Scatter(
            x=keys, y=table['cum_pct'], mode='lines+markers', name='Cumulative %',
            line=dict(color=PARETO_LINE_COLOR, width=2),
            marker=dict(size=8, color=PARETO_LINE_COLOR, opacity=point_opacity),
            customdata=customdata,
            hovertemplate='<b>%{customdata[1]}</b><br>Cumulative: %{y:.1f}%<extra></extra>',
        ),
        secondary_y=True,
    )
    fig.add_hline(y=80, secondary_y=True, line_dash='dash',
                  line_color=REFERENCE_LINE_COLOR, annotation_text='80%',
                  annotation_font_color=REFERENCE_LINE_COLOR)

    _apply_theme(fig)
    fig.update_layout(title=title, height=450, transition=get_transition(),
                      clickmode='event+select')
    fig.update_xaxes(title_text='Jurisdiction')
    fig.update_yaxes(title_text='Positive tests', secondary_y=False)
    fig.update_yaxes(title_text='Cumulative %', secondary_y=True, range=[0, 105],
                     showgrid=False, ticksuffix='%')
    return fig


# ============================================================================
# DETECTION STAGES (layered / stacked areas)
# ============================================================================

def _stage_fill(stage: str, base_alpha: float, selection) -> str:
    color = STAGE_COLORS[stage]
    selected = _selected(selection)
    if selected is None:
        return with_alpha(color, base_alpha)
    return with_alpha(color, 0.85 if selected == stage else 0.08)


def chart_detection_layered(wide: pd.DataFrame, selection=None) -> go.Figure:
    """Overlapping area chart of positive detections per stage by year.

    Layers are drawn back to front in ``LAYER_DRAW_ORDER`` with per-stage
    fill opacity so every layer stays visible.  Selecting a stage raises its
    fill to 0.85 and fades the others to 0.08.

    Args:
        wide: Output of ``stage_by_year()`` (years x stages, zero-filled).
        selection: The detection chart's SelectionState, keyed on stage name.
    """
    title = 'Positive Detections by Testing Stage (Layered)'
    if wide.empty or wide.to_numpy().sum() == 0:
        return no_data_figure(title)

    selected = _selected(selection)
    years = wide.index.tolist()
    fig = go.Figure()
    for stage in LAYER_DRAW_ORDER:
        if stage not in wide.columns:
            continue
        dimmed = selected is not None and selected != stage
        fig.add_trace(go.Scatter(
            x=years, y=wide[stage], name=stage, mode='lines+markers',
            fill='tozeroy',
            fillcolor=_stage_fill(stage, STAGE_OPACITY.get(stage, 0.5), selection),
            line=dict(color=with_alpha(STAGE_COLORS[stage], 0.25 if dimmed else 1), width=2),
            marker=dict(size=5),
            customdata=[[stage]] * len(years),
            hovertemplate=f'<b>{stage}</b><br>Year: %{{x}}<br>Positives: %{{y:,}}<extra></extra>',
        ))

    _apply_theme(fig)
    fig.update_layout(title=title, height=450, hovermode='closest',
                      transition=get_transition(), clickmode='event+select')
    fig.update_xaxes(title_text='Year', dtick=1)
    fig.update_yaxes(title_text='Positive detections', rangemode='tozero')
    return fig


def chart_detection_stacked(wide: pd.DataFrame, selection=None) -> go.Figure:
    """Stacked area chart of the same stage-by-year table.

    Stages stack bottom-up in ``DETECTION_STAGES`` order using the single-hue
    ``STACKED_STAGE_COLORS`` palette; the unified hover lists every stage and
    the year total.
    """
    title = 'Positive Detections by Testing Stage (Stacked)'
    if wide.empty or wide.to_numpy().sum() == 0:
        return no_data_figure(title)

    selected = _selected(selection)
    years = wide.index.tolist()
    fig = go.Figure()
    for stage in DETECTION_STAGES:
        if stage not in wide.columns:
            continue
        color = STACKED_STAGE_COLORS[stage]
        if selected is not None and selected != stage:
            color = with_alpha(color, 0.12)
        fig.add_trace(go.Scatter(
            x=years, y=wide[stage], name=stage, mode='lines',
            stackgroup='stages', line=dict(width=0.5, color=color), fillcolor=color,
            customdata=[[stage]] * len(years),
            hovertemplate=f'{stage}: %{{y:,}}<extra></extra>',
        ))

    totals = wide[[s for s in DETECTION_STAGES if s in wide.columns]].sum(axis=1)
    fig.add_trace(go.Scatter(
        x=years, y=totals, name='Total', mode='lines',
        line=dict(width=0, color='rgba(0,0,0,0)'), showlegend=False,
        hovertemplate='<b>Total: %{y:,}</b><extra></extra>',
    ))

    _apply_theme(fig)
    fig.update_layout(title=title, height=450, hovermode='x unified',
                      transition=get_transition(), clickmode='event+select')
    fig.update_xaxes(title_text='Year', dtick=1)
    fig.update_yaxes(title_text='Positive detections', rangemode='tozero')
    return fig


# ============================================================================
# DETECTION METHOD TOTALS
# ============================================================================

def chart_detection_methods(table: pd.DataFrame) -> go.Figure:
    """Bar chart of positive counts per raw detection method.

    Bars follow the row order of ``table`` (``detection_method_totals()``
    already applied the sort chosen in the sidebar).
    """
    title = 'Detection Method Contribution'
    if table.empty:
        return no_data_figure(title, height=320)

    fig = go.Figure(go.Bar(
        x=table['detection_method'], y=table['total'],
        marker=dict(color=METHOD_BAR_COLOR),
        hovertemplate='%{x}: %{y:,}<extra></extra>',
    ))
    _apply_theme(fig)
    fig.update_layout(title=title, height=320, showlegend=False)
    fig.update_xaxes(categoryorder='array', categoryarray=table['detection_method'].tolist(),
                     tickangle=-20)
    fig.update_yaxes(title_text='Positive tests', rangemode='tozero')
    return fig


# ============================================================================
# LOCATION RADAR
# ============================================================================

def chart_location_radar(stats: pd.DataFrame, selected_location: Optional[str] = None,
                         metric: str = 'positive') -> go.Figure:
    """Radar profile of one metric across locations.

    Parameters
    ----------
    stats : pd.DataFrame
        Output of ``location_stats()``: ``location, total, positive, rate``.
    selected_location : str, optional
        Location chosen in the dropdown.  Its point is enlarged and drawn in
        ``RADAR_SELECTED_COLOR``; other points fade to 0.25 and the filled
        area lightens.  ``None`` or "Overview" means no highlight.
    metric : {'positive', 'total'}
        Which column sets the radius.

    Returns
    -------
    go.Figure
        A 450px polar chart, or a "No data available" figure.
    """
    title = 'Location Positive Detection Profile' if metric == 'positive' else 'Location Test Profile'
    if stats.empty:
        return no_data_figure(title, height=450)

    locations = stats['location'].tolist()
    values = stats[metric].tolist()
    if selected_location not in locations:
        selected_location = None

    colors, sizes, opacity = [], [], []
    for loc in locations:
        chosen = loc == selected_location
        colors.append(RADAR_SELECTED_COLOR if chosen else RADAR_COLOR)
        sizes.append(RADAR_POINT_SIZE['selected'] if chosen else RADAR_POINT_SIZE['base'])
        opacity.append(1.0 if selected_location is None or chosen else 0.25)

    fig = go.Figure()
    fig.add_trace(go.Scatterpolar(
        r=values + values[:1], theta=locations + locations[:1],
        fill='toself',
        fillcolor=with_alpha(RADAR_COLOR, 0.05 if selected_location else 0.15),
        line=dict(color=RADAR_COLOR, width=2, shape='spline'),
        mode='lines', hoverinfo='skip', showlegend=False,
    ))
    fig.add_trace(go.Scatterpolar(
        r=values, theta=locations, mode='markers',
        marker=dict(color=colors, size=sizes, opacity=opacity,
                    line=dict(color='#ffffff', width=1)),
        customdata=stats[['location', 'total', 'positive', 'rate']].values.tolist(),
        hovertemplate=(
            '<b>%{customdata[0]}</b><br>Tests: %{customdata[1]:,}<br>'
            'Positive: %{customdata[2]:,}<br>Rate: %{customdata[3]:.1f}%<extra></extra>'
        ),
        showlegend=False,
    ))

    _apply_theme(fig)
    fig.update_layout(
        title=title,
        height=450,
        transition=get_transition(),
        polar=dict(
            bgcolor='rgba(0,0,0,0)',
            radialaxis=dict(range=[0, max(values) or 1], gridcolor='#cccccc',
                            tickfont=dict(color=MUTED_TEXT_COLOR)),
            angularaxis=dict(gridcolor='#e5e7eb', tickfont=dict(size=11)),
        ),
    )
    return fig
