"""
Drug Testing Dashboard - Map Figures
====================================

Choropleth figures drawn from the state boundary GeoJSON.

Both maps key Plotly locations on the lowercase state name that
``data.loader.load_geojson`` stores in each feature's ``id``, and both draw
state labels with a ``go.Scattergeo`` text trace placed at the centroid of
each state's largest polygon ring (so Tasmania's label sits on the main
island rather than somewhere in Bass Strait).

Map view
--------
``map_view()`` fits the projection to the bounding box of every coordinate
in the collection.  If no usable coordinate exists it logs a warning and
falls back to ``FALLBACK_MAP_CENTER`` / ``FALLBACK_MAP_SCALE``.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd
import plotly.graph_objects as go

from ..core.config import (
    DRUG_COLORS, ROADSIDE_DRUGS, NO_DATA_FILL, GREYED_FILL, MAP_STROKE,
    FALLBACK_MAP_CENTER, FALLBACK_MAP_SCALE, LABEL_SIZE, LABEL_COLOR, OVERVIEW_LABEL,
)
from ..data.jurisdictions import feature_name, feature_display_name
from .color_scale import LinearColorScale, region_style
from .styles import get_plotly_theme, get_transition
from .charts import no_data_figure

logger = logging.getLogger(__name__)

MAP_UNAVAILABLE = 'Map data not available. Add australia_states.geojson to the data directory.'

# Padding (degrees) around the fitted bounds.
_BOUNDS_PADDING = 1.0


# ============================================================================
# GEOMETRY HELPERS
# ============================================================================

def _polygons(geometry: Optional[dict]) -> List[list]:
    """Return a list of polygons (each a list of rings) for a geometry."""
    if not geometry:
        return []
    kind = geometry.get('type')
    coords = geometry.get('coordinates') or []
    if kind == 'Polygon':
        return [coords]
    if kind == 'MultiPolygon':
        return list(coords)
    return []


def _iter_points(geojson: dict) -> Iterable[Tuple[float, float]]:
    for feature in geojson.get('features') or []:
        for polygon in _polygons(feature.get('geometry')):
            for ring in polygon:
                for point in ring:
                    if len(point) >= 2:
                        yield float(point[0]), float(point[1])


def feature_bounds(geojson: Optional[dict]) -> Optional[Tuple[float, float, float, float]]:
    """``(lon_min, lat_min, lon_max, lat_max)`` over all features, or None."""
    if not geojson:
        return None
    lons, lats = [], []
    for lon, lat in _iter_points(geojson):
        if lon == lon and lat == lat:  # skip NaN
            lons.append(lon)
            lats.append(lat)
    if not lons:
        return None
    return min(lons), min(lats), max(lons), max(lats)


def map_view(geojson: Optional[dict]) -> dict:
    """Layout ``geo`` settings that frame the features.

    Returns a dict suitable for ``fig.update_geos(**view)``.
    """
    base = dict(visible=False, projection_type='mercator', bgcolor='rgba(0,0,0,0)')
    bounds = feature_bounds(geojson)
    if bounds is None:
        logger.warning("Could not compute map bounds from GeoJSON, using fallback view")
        return dict(base, center=dict(FALLBACK_MAP_CENTER), projection_scale=FALLBACK_MAP_SCALE)

    lon_min, lat_min, lon_max, lat_max = bounds
    return dict(
        base,
        center=dict(lon=(lon_min + lon_max) / 2, lat=(lat_min + lat_max) / 2),
        lonaxis_range=[lon_min - _BOUNDS_PADDING, lon_max + _BOUNDS_PADDING],
        lataxis_range=[lat_min - _BOUNDS_PADDING, lat_max + _BOUNDS_PADDING],
    )


def _ring_area_centroid(ring) -> Tuple[float, float, float]:
    """(area, cx, cy) of one ring via the shoelace formula; area is unsigned."""
    area = cx = cy = 0.0
    n = len(ring)
    for i in range(n):
        x0, y0 = ring[i][0], ring[i][1]
        x1, y1 = ring[(i + 1) % n][0], ring[(i + 1) % n][1]
        cross = x0 * y1 - x1 * y0
        area += cross
        cx += (x0 + x1) * cross
        cy += (y0 + y1) * cross
    area /= 2.0
    if area == 0:
        xs = [p[0] for p in ring]
        ys = [p[1] for p in ring]
        return 0.0, sum(xs) / len(xs), sum(ys) / len(ys)
    return abs(area), cx / (6.0 * area), cy / (6.0 * area)


def feature_centroid(feature: dict) -> Optional[Tuple[float, float]]:
    """``(lon, lat)`` label position: centroid of the largest outer ring."""
    best = None
    for polygon in _polygons(feature.get('geometry')):
        if not polygon or len(polygon[0]) < 3:
            continue
        area, cx, cy = _ring_area_centroid(polygon[0])
        if best is None or area > best[0]:
            best = (area, cx, cy)
    if best is None:
        return None
    return best[1], best[2]


def _label_trace(features, sizes, colors) -> go.Scattergeo:
    lons, lats, texts, text_sizes, text_colors = [], [], [], [], []
    for feature, size, color in zip(features, sizes, colors):
        centroid = feature_centroid(feature)
        if centroid is None:
            continue
        lons.append(centroid[0])
        lats.append(centroid[1])
        texts.append(f'<b>{feature_display_name(feature)}</b>')
        text_sizes.append(size)
        text_colors.append(color)
    return go.Scattergeo(
        lon=lons, lat=lats, text=texts, mode='text',
        textfont=dict(size=text_sizes, color=text_colors),
        hoverinfo='skip', showlegend=False,
    )


def _finish_map(fig: go.Figure, geojson: dict, title: str, height: int) -> go.Figure:
    fig.update_layout(**get_plotly_theme())
    fig.update_layout(title=title, height=height, transition=get_transition(),
                      clickmode='event+select', margin=dict(l=10, r=10, t=60, b=10))
    fig.update_geos(**map_view(geojson))
    return fig


# ============================================================================
# LOCATION CHOROPLETH
# ============================================================================

def chart_location_choropleth(geojson: Optional[dict], totals: Dict[str, float],
                              location: Optional[str] = OVERVIEW_LABEL) -> go.Figure:
    """Tests per state for one location (or all rows in "Overview").

    States with a positive total are filled on a linear scale from 0 to the
    largest total in the view.  States without data get the separate
    no-data fill; with a location selected they also fade to 0.15 opacity
    and their labels shrink and turn grey.

    Parameters
    ----------
    geojson : dict or None
        Output of ``load_geojson()``.  None renders the "map not available"
        placeholder.
    totals : dict
        ``{lowercase state name: total}`` from ``jurisdiction_totals()``.
    location : str, optional
        Current dropdown value; None or "Overview" means overview mode.

    Returns
    -------
    go.Figure
    """
    location = location or OVERVIEW_LABEL
    title = f'Jurisdiction contribution: {location}'
    if not geojson:
        return no_data_figure(title, MAP_UNAVAILABLE, height=450)

    overview = location.strip().lower() == OVERVIEW_LABEL.lower()
    positives = [v for v in totals.values() if v and v > 0]
    scale = LinearColorScale(max(positives) if positives else 0)
    grand_total = sum(positives)

    features = geojson['features']
    styles = [region_style(totals.get(f.get('id') or feature_name(f), 0), scale, overview)
              for f in features]

    data_ids, data_z, data_custom = [], [], []
    empty_ids, empty_opacity, empty_custom = [], [], []
    for feature, style in zip(features, styles):
        fid = feature.get('id') or feature_name(feature)
        display = feature_display_name(feature)
        if style.has_data:
            value = totals[fid]
            data_ids.append(fid)
            data_z.append(value)
            data_custom.append([display, value / grand_total * 100 if grand_total else 0.0])
        else:
            empty_ids.append(fid)
            empty_opacity.append(style.opacity)
            empty_custom.append([display])

    fig = go.Figure()
    if empty_ids:
        empty_hover = ('<b>%{customdata[0]}</b><br>Tests: 0<extra></extra>' if overview
                       else '<b>%{customdata[0]}</b><br>No tests for this location<extra></extra>')
        fig.add_trace(go.Choropleth(
            geojson=geojson, locations=empty_ids, z=[0] * len(empty_ids),
            colorscale=[[0, NO_DATA_FILL], [1, NO_DATA_FILL]], showscale=False,
            marker=dict(opacity=empty_opacity, line=dict(color=MAP_STROKE, width=0.8)),
            customdata=empty_custom, hovertemplate=empty_hover, name='No data',
        ))
    if data_ids:
        fig.add_trace(go.Choropleth(
            geojson=geojson, locations=data_ids, z=data_z,
            zmin=0, zmax=scale.max_value, colorscale=scale.plotly_colorscale(),
            marker=dict(line=dict(color=MAP_STROKE, width=0.8)),
            colorbar=dict(title=dict(text='Tests'), thickness=12, len=0.5,
                          tickvals=[0, scale.max_value],
                          ticktext=['0', f'{round(scale.max_value):,}']),
            customdata=data_custom,
            hovertemplate=('<b>%{customdata[0]}</b><br>Tests: %{z:,}<br>'
                           'Share: %{customdata[1]:.1f}%<extra></extra>'),
            name='Tests',
        ))

    fig.add_trace(_label_trace(features, [s.label_size for s in styles],
                               [s.label_color for s in styles]))
    logger.debug(f"Choropleth for {location}: {len(data_ids)} states with data, max {scale.max_value}")
    return _finish_map(fig, geojson, title, height=450)


# ============================================================================
# DOMINANT DRUG MAP
# ============================================================================

def chart_dominant_drug_map(geojson: Optional[dict], table: pd.DataFrame,
                            selection=None, drugs=ROADSIDE_DRUGS) -> go.Figure:
    """Categorical map colouring each state by its most detected drug.

    One choropleth trace per state keeps per-state fill, opacity and outline
    independent.  With a state selected, every other state is drawn in
    ``GREYED_FILL`` and the selected one gets the selection outline.  States
    absent from ``table`` or with a zero total use ``NO_DATA_FILL``.

    Args:
        geojson: Output of ``load_geojson()`` or None.
        table: Output of ``dominant_drugs()`` indexed by lowercase state name.
        selection: The map's SelectionState, keyed on lowercase state name.
        drugs: Drugs shown in the legend, in order.
    """
    title = 'Most Detected Drug by Jurisdiction (2021 onwards)'
    if not geojson:
        return no_data_figure(title, MAP_UNAVAILABLE, height=480)

    fig = go.Figure()
    features = geojson['features']
    for feature in features:
        fid = feature.get('id') or feature_name(feature)
        display = feature_display_name(feature)
        row = table.loc[fid] if fid in table.index else None
        dominant = row['dominant'] if row is not None else None
        has_data = row is not None and row['total'] > 0 and isinstance(dominant, str)

        fill = DRUG_COLORS.get(dominant, NO_DATA_FILL) if has_data else NO_DATA_FILL
        if selection is not None:
            emphasis = selection.emphasis(fid)
            if emphasis.greyed:
                fill = GREYED_FILL
            stroke, width = emphasis.stroke_color, emphasis.stroke_width
        else:
            stroke, width = '#ffffff', 1.0

        if has_data:
            hover = (f'<b>{display}</b><br>Most detected: {dominant.title()}<br>'
                     f'Total positives: {int(row["total"]):,}<extra></extra>')
        else:
            hover = f'<b>{display}</b><br>No data<extra></extra>'

        fig.add_trace(go.Choropleth(
            geojson=geojson, locations=[fid], z=[1],
            colorscale=[[0, fill], [1, fill]], showscale=False,
            marker=dict(line=dict(color=stroke, width=width)),
            customdata=[[fid]], hovertemplate=hover, name=display, showlegend=False,
        ))

    # Legend swatches; choropleth traces carry no legend markers of their own.
    for drug in drugs:
        fig.add_trace(go.Scattergeo(
            lon=[None], lat=[None], mode='markers', name=drug.title(),
            marker=dict(size=12, symbol='square', color=DRUG_COLORS.get(drug, '#cccccc')),
            hoverinfo='skip',
        ))
    fig.add_trace(go.Scattergeo(
        lon=[None], lat=[None], mode='markers', name='No data',
        marker=dict(size=12, symbol='square', color=NO_DATA_FILL,
                    line=dict(color=MAP_STROKE, width=1)),
        hoverinfo='skip',
    ))

    fig.add_trace(_label_trace(features, [LABEL_SIZE] * len(features),
                               [LABEL_COLOR] * len(features)))
    fig = _finish_map(fig, geojson, title, height=480)
    fig.update_layout(legend=dict(orientation='v', yanchor='top', y=0.95, xanchor='left', x=0.0))
    return fig
