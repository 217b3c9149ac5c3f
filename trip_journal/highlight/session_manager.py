# trip_journal/highlight/session_manager.py
"""Lifecycle of per-connection highlight engines."""

import time
import threading
import logging
from typing import Callable, Dict, List, Optional, Any
from datetime import datetime, timedelta

from trip_journal.api.config import get_highlight_config
from trip_journal.api.models import MapViewport, Stop, TargetKind
from trip_journal.api.services.map_service import MapService
from trip_journal.highlight.coordinator import HighlightCoordinator
from trip_journal.highlight.registry import MarkerRegistry
from trip_journal.highlight.renderer import CrossHighlightRenderer
from trip_journal.highlight.surface import MapSurface

logger = logging.getLogger(__name__)


class HighlightSession:
    """The engine behind one open trip page: registry, coordinator, renderer."""

    def __init__(self, session_id: str, user_ip: str, surface: MapSurface,
                 config: Optional[dict] = None, timer_factory: Optional[Callable] = None):
        self.session_id = session_id
        self.user_ip = user_ip
        self.config = config or get_highlight_config()

        # Timestamps
        self.created_at = datetime.now()
        self.last_activity = datetime.now()

        # Components
        self.registry = MarkerRegistry()
        self.coordinator = HighlightCoordinator(
            dismiss_delay_ms=self.config["dismiss_delay_ms"],
            timer_factory=timer_factory,
        )
        self.renderer = CrossHighlightRenderer(self.registry, surface, self.config)
        self.renderer.attach(self.coordinator)

        # State
        self.trip_id: Optional[int] = None
        self.viewport: Optional[MapViewport] = None

        # Stats
        self.event_count = 0
        self.load_count = 0

    def touch(self) -> None:
        self.last_activity = datetime.now()
        self.event_count += 1

    def load_stops(self, trip_id: int, stops: List[Stop]) -> Optional[MapViewport]:
        """Rebuild the markers for a newly loaded stop set and refit the map.

        This is the only place the viewport is recomputed; later events reuse
        ``self.viewport``.

        Returns:
            The new viewport, or None if no stop can be placed on the map
        """
        self.coordinator.reset()
        self.registry.clear()

        for stop in stops:
            if not MapService.validate_coordinates(stop.latitude, stop.longitude):
                continue
            self.registry.register(
                TargetKind.STOP, stop.id, stop.position,
                label=str(stop.trip_stop_number or stop.id),
            )
            for poi in stop.pois:
                if MapService.validate_coordinates(poi.latitude, poi.longitude):
                    self.registry.register(TargetKind.POI, poi.id, poi.position, poi.category)

        mappable = MapService.mappable_stops(stops)
        self.trip_id = trip_id
        self.load_count += 1
        self.viewport = MapService.calculate_viewport(mappable) if mappable else None

        if self.viewport is not None:
            self.renderer.fit(self.viewport)
        else:
            self.renderer.visible_bounds = None

        logger.info(
            f"Session {self.session_id} loaded trip {trip_id}: "
            f"{len(self.registry)} markers"
        )
        return self.viewport

    def close(self) -> None:
        self.coordinator.close()
        self.renderer.detach()
        self.registry.clear()


class HighlightSessionManager:
    """Manages the highlight sessions of all connected browsers."""

    def __init__(self, config: Optional[dict] = None, start_cleanup: bool = True):
        self.config = config or get_highlight_config()
        self.sessions: Dict[str, HighlightSession] = {}

        # Thread safety
        self.lock = threading.Lock()

        if start_cleanup:
            self.cleanup_thread = threading.Thread(
                target=self._cleanup_loop,
                daemon=True
            )
            self.cleanup_thread.start()

        logger.info("HighlightSessionManager initialized")

    def create_session(self, session_id: str, user_ip: str, surface: MapSurface,
                       timer_factory: Optional[Callable] = None) -> Optional[HighlightSession]:
        """Create (or reuse) the session for a Socket.IO connection.

        Args:
            session_id: Socket.IO sid of the connection
            user_ip: Client address, for logging
            surface: Where map and list updates are sent

        Returns:
            HighlightSession or None if the server is at capacity
        """
        with self.lock:
            existing = self.sessions.get(session_id)
            if existing:
                logger.info(f"Reusing highlight session {session_id}")
                return existing

            if len(self.sessions) >= self.config["max_sessions"]:
                logger.warning("Maximum highlight sessions reached")
                return None

            session = HighlightSession(
                session_id, user_ip, surface,
                config=self.config, timer_factory=timer_factory,
            )
            self.sessions[session_id] = session

            logger.info(f"Created highlight session {session_id} for IP {user_ip}")
            return session

    def get_session(self, session_id: str) -> Optional[HighlightSession]:
        with self.lock:
            session = self.sessions.get(session_id)
            if session:
                session.last_activity = datetime.now()
            return session

    def remove_session(self, session_id: str, reason: str = "manual") -> None:
        """Close and forget a session."""
        with self.lock:
            session = self.sessions.pop(session_id, None)
        if session is None:
            return

        session.close()
        duration = (datetime.now() - session.created_at).total_seconds()
        logger.info(
            f"Removed highlight session {session_id} - "
            f"Reason: {reason}, Duration: {duration:.1f}s, Events: {session.event_count}"
        )

    def get_stats(self) -> Dict[str, Any]:
        with self.lock:
            return {
                "total_sessions": len(self.sessions),
                "total_events": sum(s.event_count for s in self.sessions.values()),
                "trips": sorted({s.trip_id for s in self.sessions.values() if s.trip_id is not None}),
                "config": {
                    "max_sessions": self.config["max_sessions"],
                    "timeout_seconds": self.config["session_timeout_seconds"],
                    "dismiss_delay_ms": self.config["dismiss_delay_ms"],
                },
            }

    def _cleanup_loop(self):
        """Background thread to drop sessions whose browser went quiet."""
        while True:
            try:
                time.sleep(self.config["cleanup_interval_seconds"])
                self.cleanup_expired_sessions()
            except Exception as e:
                logger.error(f"Error in cleanup loop: {e}")

    def cleanup_expired_sessions(self) -> int:
        """Remove sessions that have exceeded the idle timeout."""
        cutoff_time = datetime.now() - timedelta(seconds=self.config["session_timeout_seconds"])

        with self.lock:
            expired = [
                sid for sid, session in self.sessions.items()
                if session.last_activity < cutoff_time
            ]

        for sid in expired:
            self.remove_session(sid, "timeout")

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired highlight sessions")
        return len(expired)


# Global session manager instance
_session_manager = None


def get_session_manager() -> HighlightSessionManager:
    """Get the global HighlightSessionManager instance."""
    global _session_manager
    if _session_manager is None:
        _session_manager = HighlightSessionManager()
    return _session_manager
