# trip_journal/highlight/surface.py
"""Calls the highlight engine makes against the map and the itinerary list."""

from typing import List, Optional

from trip_journal.api.models import Bounds, LatLng, TargetKind


class MapSurface:
    """Interface to whatever draws the map and the itinerary list.

    The engine only ever issues these calls; how they are drawn is up to the
    implementation (see ``SocketIOMapSurface`` for the browser bridge).
    """

    def fit_bounds(self, bounds: Bounds) -> None:
        raise NotImplementedError

    def pan_to(self, point: LatLng) -> None:
        raise NotImplementedError

    def set_marker_icon(self, key: str, icon: dict, pulse: Optional[List[float]] = None) -> None:
        """Replace a marker's icon; ``pulse`` is a list of per-frame scales."""
        raise NotImplementedError

    def set_marker_z_order(self, key: str, z_index: Optional[int]) -> None:
        raise NotImplementedError

    def scroll_into_view(self, kind: TargetKind, entity_id: int) -> None:
        raise NotImplementedError

    def set_row_pulse(self, kind: TargetKind, entity_id: int, active: bool) -> None:
        raise NotImplementedError
