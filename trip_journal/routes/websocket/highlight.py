# trip_journal/routes/websocket/highlight.py
"""WebSocket handlers feeding list and map events into the highlight engine."""

import logging
from flask import request

from .base import BaseWebSocketHandler
from trip_journal.api import supabase
from trip_journal.api.errors import InvalidEventError, TripNotFoundError
from trip_journal.api.models import Bounds
from trip_journal.api.services.map_service import MapService
from trip_journal.api.services.trip_service import TripService
from trip_journal.highlight.session_manager import get_session_manager

logger = logging.getLogger(__name__)


class HighlightHandler(BaseWebSocketHandler):
    """Handles stop/POI hover, click and viewport events."""

    def _session(self):
        highlight_session = get_session_manager().get_session(request.sid)
        if highlight_session is None:
            self.emit_to_client("error", {"message": "No session available"})
            return None
        highlight_session.touch()
        return highlight_session

    def register_handlers(self):
        """Register highlight-related event handlers."""

        @self.socketio.on("load_trip", namespace=self.namespace)
        def handle_load_trip(data=None):
            """Load a trip's stops, rebuild markers and fit the map once."""
            highlight_session = self._session()
            if highlight_session is None:
                return

            try:
                trip_id = TripService.parse_trip_id((data or {}).get("trip_id"))
                if supabase.fetch_trip(trip_id) is None:
                    raise TripNotFoundError(f"Trip {trip_id} not found")

                stops = TripService.load_stops(trip_id)
                viewport = highlight_session.load_stops(trip_id, stops)
                mappable = MapService.mappable_stops(stops)

                self.emit_to_client("trip_loaded", {
                    "trip_id": trip_id,
                    "stop_count": len(stops),
                    "viewport": viewport.to_dict() if viewport else None,
                    "markers": MapService.build_markers(mappable),
                    "polylines": MapService.build_polylines(mappable) if mappable else [],
                    "map_options": MapService.map_options(highlight_session.config),
                })
                self.log_event("load_trip", {"trip_id": trip_id, "stops": len(stops)})

            except Exception as exc:
                self.handle_error(exc, "load_trip")

        @self.socketio.on("map_ready", namespace=self.namespace)
        def handle_map_ready(data=None):
            """Re-send the current fit without recomputing the viewport."""
            highlight_session = self._session()
            if highlight_session is None or highlight_session.viewport is None:
                return
            highlight_session.renderer.fit(highlight_session.viewport)

        @self.socketio.on("viewport_changed", namespace=self.namespace)
        def handle_viewport_changed(data=None):
            highlight_session = self._session()
            if highlight_session is None:
                return
            try:
                bounds = Bounds.from_dict(data or {})
            except (KeyError, TypeError, ValueError) as exc:
                self.handle_error(InvalidEventError(f"Invalid bounds: {exc}"), "viewport_changed")
                return
            highlight_session.renderer.update_visible_bounds(bounds)

        @self.socketio.on("pointer_enter", namespace=self.namespace)
        def handle_pointer_enter(data=None):
            highlight_session = self._session()
            if highlight_session is None:
                return
            try:
                kind, entity_id = self.parse_target(data)
                highlight_session.coordinator.pointer_enter(kind, entity_id, self.parse_source(data))
            except Exception as exc:
                self.handle_error(exc, "pointer_enter")

        @self.socketio.on("pointer_leave", namespace=self.namespace)
        def handle_pointer_leave(data=None):
            highlight_session = self._session()
            if highlight_session is None:
                return
            try:
                kind, entity_id = self.parse_target(data)
                highlight_session.coordinator.pointer_leave(kind, entity_id, self.parse_source(data))
            except Exception as exc:
                self.handle_error(exc, "pointer_leave")

        @self.socketio.on("popup_enter", namespace=self.namespace)
        def handle_popup_enter(data=None):
            highlight_session = self._session()
            if highlight_session is not None:
                highlight_session.coordinator.popup_enter()

        @self.socketio.on("popup_leave", namespace=self.namespace)
        def handle_popup_leave(data=None):
            highlight_session = self._session()
            if highlight_session is not None:
                highlight_session.coordinator.popup_leave()

        @self.socketio.on("marker_click", namespace=self.namespace)
        def handle_marker_click(data=None):
            highlight_session = self._session()
            if highlight_session is None:
                return
            try:
                kind, entity_id = self.parse_target(data)
                highlight_session.coordinator.marker_click(kind, entity_id)
            except Exception as exc:
                self.handle_error(exc, "marker_click")

        @self.socketio.on("canvas_click", namespace=self.namespace)
        def handle_canvas_click(data=None):
            highlight_session = self._session()
            if highlight_session is not None:
                highlight_session.coordinator.canvas_click()

        @self.socketio.on("get_state", namespace=self.namespace)
        def handle_get_state(data=None):
            """Current highlight state and emphasized markers, for debugging."""
            highlight_session = self._session()
            if highlight_session is None:
                return
            self.emit_to_client("highlight_state", {
                **highlight_session.coordinator.state.to_dict(),
                "emphasized": [
                    f"{e.kind.value}-{e.id}" for e in highlight_session.registry.emphasized()
                ],
                "trip_id": highlight_session.trip_id,
                "dismissal_pending": highlight_session.coordinator.dismissal_pending,
            })
