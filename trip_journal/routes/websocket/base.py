# trip_journal/routes/websocket/base.py
"""Shared plumbing for the highlight namespace handlers."""

import logging
from flask import request
from flask_socketio import emit

from trip_journal.api.errors import (
    DataServiceError,
    InvalidEventError,
    InvalidTripIdError,
    TripNotFoundError,
)
from trip_journal.api.models import TargetKind
from trip_journal.highlight.coordinator import EventSource

logger = logging.getLogger(__name__)

NAMESPACE = "/trips/ws"

# Errors the browser caused or can recover from; anything else is a server bug
ERROR_CODES = {
    InvalidEventError: "invalid_event",
    InvalidTripIdError: "invalid_trip_id",
    TripNotFoundError: "trip_not_found",
    DataServiceError: "data_unavailable",
}


class BaseWebSocketHandler:
    """Per-namespace helpers: emitting, client lookup, logging, payload parsing."""

    def __init__(self, socketio, namespace=NAMESPACE):
        self.socketio = socketio
        self.namespace = namespace

    def emit_to_client(self, event, data, room=None):
        """Reply to the current client, or to ``room`` outside a handler."""
        try:
            if room:
                self.socketio.emit(event, data, to=room, namespace=self.namespace)
            else:
                emit(event, data, namespace=self.namespace)
        except Exception as e:
            logger.error(f"Failed to emit {event}: {e}")

    def get_client_info(self):
        return {
            "sid": request.sid,
            "ip": request.remote_addr,
            "user_agent": request.headers.get('User-Agent', 'unknown'),
        }

    def log_event(self, event_name, data=None):
        sid = request.sid
        if data:
            logger.info(f"[WS] {event_name} ({sid}) {data}")
        else:
            logger.info(f"[WS] {event_name} ({sid})")

    def handle_error(self, error, event_name=""):
        """Report ``error`` to the client as an ``error`` event.

        Known application errors are logged as warnings with a stable
        ``code``; anything else is logged with its traceback.
        """
        code = next(
            (c for exc_type, c in ERROR_CODES.items() if isinstance(error, exc_type)),
            "internal_error",
        )
        if code == "internal_error":
            logger.exception(f"[WS] {event_name} failed for {request.sid}: {error}")
        else:
            logger.warning(f"[WS] {event_name} rejected for {request.sid}: {error}")
        self.emit_to_client('error', {'message': str(error), 'event': event_name, 'code': code})

    @staticmethod
    def parse_target(data):
        """Extract ``(kind, id)`` from an event payload.

        Raises:
            InvalidEventError: If the payload does not name a stop or POI
        """
        if not isinstance(data, dict):
            raise InvalidEventError("Event payload must be an object")
        try:
            kind = TargetKind(data.get("kind"))
        except ValueError:
            raise InvalidEventError(f"Unknown target kind: {data.get('kind')!r}")
        entity_id = data.get("id")
        if isinstance(entity_id, bool) or not isinstance(entity_id, (int, str)):
            raise InvalidEventError(f"Invalid target id: {entity_id!r}")
        try:
            entity_id = int(entity_id)
        except ValueError:
            raise InvalidEventError(f"Invalid target id: {entity_id!r}")
        return kind, entity_id

    @staticmethod
    def parse_source(data):
        try:
            return EventSource(data.get("source", EventSource.LIST.value))
        except ValueError:
            raise InvalidEventError(f"Unknown event source: {data.get('source')!r}")
