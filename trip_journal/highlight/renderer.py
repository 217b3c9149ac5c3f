# trip_journal/highlight/renderer.py
"""Reacts to highlight changes by restyling markers, panning and scrolling."""

import logging
import math
from typing import List, Optional

from trip_journal.api.config import get_highlight_config
from trip_journal.api.models import Bounds, HighlightTarget, MapViewport
from trip_journal.highlight.coordinator import HighlightCoordinator, HighlightState
from trip_journal.highlight.registry import MarkerRegistry, marker_key_str
from trip_journal.highlight.surface import MapSurface

logger = logging.getLogger(__name__)


def pulse_scales(duration_ms: int = 300, frame_ms: int = 16,
                 peak_scale: float = 1.3) -> List[float]:
    """Per-frame scale factors for one pulse: 1 -> peak -> 1, no loop."""
    frames = max(1, math.ceil(duration_ms / frame_ms))
    amplitude = peak_scale - 1
    return [
        round(1 + math.sin(math.pi * i / frames) * amplitude, 4)
        for i in range(frames + 1)
    ]


class CrossHighlightRenderer:
    """Coordinator observer that keeps the map and the list in step.

    On every state change it:

    * re-derives emphasis for each registered marker (at most one is
      emphasized) and pushes new icons only for markers whose flag changed,
      with a single pulse for the newly emphasized one;
    * pans the map, without re-zooming, if the new target is off screen;
    * scrolls the matching itinerary row into view and pulses it, clearing
      the pulse on the row being left.
    """

    def __init__(self, registry: MarkerRegistry, surface: MapSurface,
                 config: Optional[dict] = None):
        self.registry = registry
        self.surface = surface
        self.config = config or get_highlight_config()
        self.visible_bounds: Optional[Bounds] = None
        self._pulse = pulse_scales(
            self.config["pulse_duration_ms"],
            self.config["pulse_frame_ms"],
            self.config["pulse_peak_scale"],
        )
        self._coordinator: Optional[HighlightCoordinator] = None

    def attach(self, coordinator: HighlightCoordinator) -> None:
        self.detach()
        coordinator.subscribe(self)
        self._coordinator = coordinator

    def detach(self) -> None:
        if self._coordinator is not None:
            self._coordinator.unsubscribe(self)
            self._coordinator = None

    def fit(self, viewport: MapViewport) -> None:
        """Fit the map to a freshly computed viewport."""
        self.surface.fit_bounds(viewport.bounds)
        self.visible_bounds = viewport.bounds.with_min_span(self.config["min_span_degrees"])

    def update_visible_bounds(self, bounds: Bounds) -> None:
        """Record what the browser reports it is actually showing."""
        self.visible_bounds = bounds

    def __call__(self, previous: HighlightState, current: HighlightState) -> None:
        self.on_state_change(previous, current)

    def on_state_change(self, previous: HighlightState, current: HighlightState) -> None:
        old_target, new_target = previous.target, current.target
        if old_target == new_target:
            # Hovering -> Locked on the same entity: nothing to redraw
            return

        self._restyle_markers(new_target)

        if old_target is not None:
            self.surface.set_row_pulse(old_target.kind, old_target.id, False)

        if new_target is not None:
            self._follow(new_target)
            self.surface.scroll_into_view(new_target.kind, new_target.id)
            self.surface.set_row_pulse(new_target.kind, new_target.id, True)

    def _restyle_markers(self, target: Optional[HighlightTarget]) -> None:
        z_index = self.config["emphasized_z_index"]
        for entry in self.registry:
            emphasized = target is not None and entry.key == (target.kind, target.id)
            if entry.is_emphasized == emphasized:
                continue

            self.registry.set_emphasis(entry.kind, entry.id, emphasized)
            key = marker_key_str(entry.kind, entry.id)
            if emphasized:
                self.surface.set_marker_icon(key, entry.icon(), pulse=self._pulse)
                self.surface.set_marker_z_order(key, z_index)
            else:
                self.surface.set_marker_icon(key, entry.icon())
                self.surface.set_marker_z_order(key, None)

    def _follow(self, target: HighlightTarget) -> None:
        entry = self.registry.get(target.kind, target.id)
        if entry is None:
            # Marker removed while the event was in flight
            return

        if self.visible_bounds is not None and self.visible_bounds.contains(entry.position):
            return

        self.surface.pan_to(entry.position)
        if self.visible_bounds is not None:
            self.visible_bounds = self.visible_bounds.pan_to(entry.position)
        logger.debug(f"Panned map to {target.kind.value}-{target.id}")
