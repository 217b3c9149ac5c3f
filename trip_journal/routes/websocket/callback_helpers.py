# trip_journal/routes/websocket/callback_helpers.py
"""Bridges highlight engine calls to Socket.IO events for one browser."""

import logging
from typing import List, Optional

from trip_journal.api.models import Bounds, LatLng, TargetKind
from trip_journal.highlight.coordinator import HighlightState
from trip_journal.highlight.surface import MapSurface

logger = logging.getLogger(__name__)


class SocketIOMapSurface(MapSurface):
    """MapSurface whose calls become events on a single client's socket."""

    def __init__(self, socketio, sid: str, namespace: str = "/trips/ws"):
        self.socketio = socketio
        self.sid = sid
        self.namespace = namespace

    def emit(self, event: str, data: dict) -> None:
        try:
            self.socketio.emit(event, data, to=self.sid, namespace=self.namespace)
        except Exception as exc:
            logger.exception("Failed emitting %s: %s", event, exc)

    def fit_bounds(self, bounds: Bounds) -> None:
        self.emit("fit_bounds", {"bounds": bounds.to_dict()})

    def pan_to(self, point: LatLng) -> None:
        self.emit("pan_to", {"point": point.to_dict()})

    def set_marker_icon(self, key: str, icon: dict, pulse: Optional[List[float]] = None) -> None:
        payload = {"key": key, "icon": icon}
        if pulse:
            payload["pulse"] = pulse
        self.emit("set_marker_icon", payload)

    def set_marker_z_order(self, key: str, z_index: Optional[int]) -> None:
        self.emit("set_marker_z_order", {"key": key, "z_index": z_index})

    def scroll_into_view(self, kind: TargetKind, entity_id: int) -> None:
        self.emit("scroll_into_view", {"kind": kind.value, "id": entity_id})

    def set_row_pulse(self, kind: TargetKind, entity_id: int, active: bool) -> None:
        self.emit("row_pulse", {"kind": kind.value, "id": entity_id, "active": active})


def wire_state_broadcast(highlight_session, surface: SocketIOMapSurface) -> None:
    """Echo every highlight state change to the browser.

    The list and the info popup read ``highlight_state`` to know whether a
    POI is merely hovered or locked open.
    """
    def _on_change(previous: HighlightState, current: HighlightState) -> None:
        surface.emit("highlight_state", current.to_dict())

    highlight_session.coordinator.subscribe(_on_change)
