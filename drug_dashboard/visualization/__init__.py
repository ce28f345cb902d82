"""
Visualization module for the Drug Testing Dashboard.

Plotly figure builders, the choropleth colour scale and the shared theme.
"""

from .color_scale import LinearColorScale, RegionStyle, region_style, with_alpha
from .charts import (
    COMPARE_TRENDS,
    no_data_figure,
    chart_age_group_tests,
    chart_jurisdiction_pareto,
    chart_detection_layered,
    chart_detection_stacked,
    chart_detection_methods,
    chart_location_radar,
)
from .maps import (
    MAP_UNAVAILABLE,
    feature_bounds,
    feature_centroid,
    map_view,
    chart_location_choropleth,
    chart_dominant_drug_map,
)

__all__ = [
    'LinearColorScale',
    'RegionStyle',
    'region_style',
    'with_alpha',
    'COMPARE_TRENDS',
    'no_data_figure',
    'chart_age_group_tests',
    'chart_jurisdiction_pareto',
    'chart_detection_layered',
    'chart_detection_stacked',
    'chart_detection_methods',
    'chart_location_radar',
    'MAP_UNAVAILABLE',
    'feature_bounds',
    'feature_centroid',
    'map_view',
    'chart_location_choropleth',
    'chart_dominant_drug_map',
]
