"""
Choropleth colour scale and no-data rules.

A region with a positive total gets a colour interpolated linearly between
CHOROPLETH_LOW and CHOROPLETH_HIGH over ``[0, max]`` of the current view.
A region with no data never takes the bottom of the scale; it gets the
separate NO_DATA_FILL so that "zero" and "small" stay distinguishable.
"""

from dataclasses import dataclass

from plotly.colors import find_intermediate_color, hex_to_rgb, label_rgb

from ..core.config import (
    CHOROPLETH_LOW, CHOROPLETH_HIGH, NO_DATA_FILL, NO_DATA_OPACITY,
    LABEL_SIZE, NO_DATA_LABEL_SIZE, LABEL_COLOR, FADED_LABEL_COLOR,
)


def to_rgb_tuple(color: str):
    """``'#00176B'`` or ``'rgba(0, 23, 107, 0.3)'`` -> ``(0, 23, 107)``."""
    if color.startswith('#'):
        return hex_to_rgb(color)
    inner = color[color.index('(') + 1:color.index(')')]
    return tuple(int(float(v)) for v in inner.split(',')[:3])


def with_alpha(color: str, alpha: float) -> str:
    r, g, b = to_rgb_tuple(color)
    return f'rgba({r},{g},{b},{alpha:g})'


class LinearColorScale:
    """Linear RGB interpolation from ``low`` (at 0) to ``high`` (at max_value).

    A non-positive ``max_value`` falls back to the domain ``[0, 1]``.
    Values outside the domain are clamped.
    """

    def __init__(self, max_value: float, low: str = CHOROPLETH_LOW, high: str = CHOROPLETH_HIGH):
        self.max_value = float(max_value) if max_value and max_value > 0 else 1.0
        self.low = low
        self.high = high
        self._low_rgb = to_rgb_tuple(low)
        self._high_rgb = to_rgb_tuple(high)

    @property
    def domain(self):
        return (0.0, self.max_value)

    def fraction(self, value: float) -> float:
        return min(max(float(value) / self.max_value, 0.0), 1.0)

    def __call__(self, value: float) -> str:
        rgb = find_intermediate_color(self._low_rgb, self._high_rgb, self.fraction(value))
        return label_rgb(tuple(int(round(c)) for c in rgb))

    def plotly_colorscale(self):
        """Two-stop colorscale for a ``go.Choropleth`` with ``zmin=0``."""
        return [[0.0, self.low], [1.0, self.high]]


@dataclass(frozen=True)
class RegionStyle:
    fill: str
    opacity: float
    has_data: bool
    label_size: int
    label_color: str
    scale: float = 1.0


def region_style(value, scale: LinearColorScale, overview: bool) -> RegionStyle:
    """Fill and emphasis for one map region.

    Args:
        value: Aggregated total for the region; None / NaN / 0 mean no data.
        scale: Colour scale of the current view.
        overview: True when no location filter is active.  With a filter
            active, empty regions fade to NO_DATA_OPACITY and get a smaller,
            grey label.
    """
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        numeric = 0.0
    if numeric != numeric:  # NaN
        numeric = 0.0

    if numeric > 0:
        return RegionStyle(scale(numeric), 1.0, True, LABEL_SIZE, LABEL_COLOR)
    if overview:
        return RegionStyle(NO_DATA_FILL, 1.0, False, LABEL_SIZE, LABEL_COLOR)
    return RegionStyle(NO_DATA_FILL, NO_DATA_OPACITY, False, NO_DATA_LABEL_SIZE,
                       FADED_LABEL_COLOR, scale=0.97)
