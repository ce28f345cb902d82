"""
Exclusive click selection for a single chart.

Every interactive chart behaves the same way: clicking an item selects it and
de-emphasises the rest, clicking the selected item again clears the
selection, and clicking another item moves the selection.  One
``SelectionState`` object per chart holds that state; pages keep it in
``st.session_state`` (see dashboard/state.py) and hand it to the figure
builders, which ask ``emphasis(item)`` how to draw each element.

Streamlit reports clicks as a persistent selection rather than discrete
events: the last clicked point stays in ``event.selection`` across reruns and
a second click on the same point empties it.  ``sync()`` turns that stream
back into toggles.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Optional

from ..core.config import BAR_OPACITY, DEFAULT_STROKE, SELECTED_STROKE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Emphasis:
    """How one chart element is drawn under the current selection."""
    opacity: float
    stroke_color: str
    stroke_width: float
    greyed: bool = False
    selected: bool = False


class SelectionState:
    """Two-state machine: nothing selected, or exactly one item selected.

    Args:
        name: Chart key, used in log messages.
        opacity: ``{'base', 'selected', 'dimmed'}`` opacities.
        stroke_color: Outline of unselected items.
        selected_stroke: Outline of the selected item.
        stroke_width: Outline width of unselected items.
        selected_width: Outline width of the selected item.
    """

    def __init__(self, name: str,
                 opacity: Optional[Dict[str, float]] = None,
                 stroke_color: str = DEFAULT_STROKE,
                 selected_stroke: str = SELECTED_STROKE,
                 stroke_width: float = 1.0,
                 selected_width: float = 2.5):
        self.name = name
        self.opacity = dict(opacity or BAR_OPACITY)
        self.stroke_color = stroke_color
        self.selected_stroke = selected_stroke
        self.stroke_width = stroke_width
        self.selected_width = selected_width
        self.selected: Optional[Hashable] = None
        self.last_click: Optional[Hashable] = None

    def __repr__(self):
        return f"SelectionState({self.name!r}, selected={self.selected!r})"

    @property
    def has_selection(self) -> bool:
        return self.selected is not None

    @property
    def panel_visible(self) -> bool:
        """The detail / info panel is shown only while something is selected."""
        return self.has_selection

    def is_selected(self, item: Any) -> bool:
        return self.has_selection and item == self.selected

    def toggle(self, item: Hashable) -> Optional[Hashable]:
        """Select ``item``, or clear the selection if it is already selected.

        Returns:
            The new selection (None when cleared).
        """
        if item is None:
            return self.clear()
        self.selected = None if item == self.selected else item
        logger.debug(f"{self.name}: toggle {item!r} -> {self.selected!r}")
        return self.selected

    def clear(self) -> None:
        # last_click is kept: the widget still reports that click and must not
        # re-select it on the next sync.
        self.selected = None
        return None

    def sync(self, clicked: Optional[Hashable]) -> bool:
        """Apply the item Streamlit currently reports as clicked.

        * unchanged value: nothing happens (a rerun triggered by something else)
        * new item: toggled
        * empty after a click: the earlier click was undone, so clear if that
          item is still the selection

        Returns:
            True when the selection changed.
        """
        if clicked == self.last_click:
            return False
        before = self.selected
        if clicked is None:
            if self.selected == self.last_click:
                self.selected = None
        else:
            self.toggle(clicked)
        self.last_click = clicked
        return before != self.selected

    def emphasis(self, item: Any) -> Emphasis:
        """Return opacity / outline / greyed flag for ``item``.

        With nothing selected every item gets the base emphasis, so toggling
        the same item twice always returns the chart to its resting look.
        """
        if not self.has_selection:
            return Emphasis(self.opacity['base'], self.stroke_color, self.stroke_width)
        if item == self.selected:
            return Emphasis(self.opacity['selected'], self.selected_stroke,
                            self.selected_width, greyed=False, selected=True)
        return Emphasis(self.opacity['dimmed'], self.stroke_color, self.stroke_width, greyed=True)


def clicked_point(event, fields=('customdata', 'x')) -> Optional[Hashable]:
    """Extract one value from a ``st.plotly_chart(on_select="rerun")`` event.

    Looks at the first selected point and returns the first of ``fields``
    present on it (``customdata`` lists yield their first element).  Returns
    None when nothing is selected or the event is missing.
    """
    if isinstance(fields, str):
        fields = (fields,)
    if event is None:
        return None
    selection = getattr(event, 'selection', None)
    if selection is None and isinstance(event, dict):
        selection = event.get('selection')
    if not selection:
        return None
    points = selection.get('points') if isinstance(selection, dict) else getattr(selection, 'points', None)
    if not points:
        return None
    point = points[0]
    for field in fields:
        value = point.get(field)
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if value is not None:
            return value
    return None
