# trip_journal/highlight/coordinator.py
"""Hover/selection state shared by the itinerary list and the map.

The coordinator is the single owner of "what is emphasized right now". It is
a small state machine::

    Idle --enter--> Hovering(k, i) --click (POI)--> Locked(k, i)
     ^                  |    ^                          |
     +-----leave--------+    +--------enter (other)-----+
     ^                                                  |
     +---------click same POI / click empty canvas------+

Observers subscribe with ``subscribe(listener)`` and are called with
``(previous, current)`` on every change, in the order they subscribed.

A POI left on the map is not dismissed immediately: a grace timer gives the
pointer time to travel to the info popup. The coordinator owns that timer;
every transition bumps a generation counter, and a timer only dismisses the
hover it was started for.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from trip_journal.api.config import get_highlight_config
from trip_journal.api.models import HighlightTarget, TargetKind
from trip_journal.highlight.timer import DismissalTimer

logger = logging.getLogger(__name__)


class HighlightMode(str, Enum):
    IDLE = "idle"
    HOVERING = "hovering"
    LOCKED = "locked"


class EventSource(str, Enum):
    LIST = "list"
    MAP = "map"


@dataclass(frozen=True)
class HighlightState:
    mode: HighlightMode
    target: Optional[HighlightTarget] = None

    @classmethod
    def idle(cls) -> "HighlightState":
        return cls(HighlightMode.IDLE)

    @classmethod
    def hovering(cls, target: HighlightTarget) -> "HighlightState":
        return cls(HighlightMode.HOVERING, target)

    @classmethod
    def locked(cls, target: HighlightTarget) -> "HighlightState":
        return cls(HighlightMode.LOCKED, target)

    @property
    def is_idle(self) -> bool:
        return self.mode == HighlightMode.IDLE

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "kind": self.target.kind.value if self.target else None,
            "id": self.target.id if self.target else None,
        }


Listener = Callable[[HighlightState, HighlightState], None]


class HighlightCoordinator:
    """State machine over Idle / Hovering / Locked."""

    def __init__(self, dismiss_delay_ms: Optional[int] = None,
                 timer_factory: Optional[Callable] = None):
        if dismiss_delay_ms is None:
            dismiss_delay_ms = get_highlight_config()["dismiss_delay_ms"]
        self.dismiss_delay_ms = dismiss_delay_ms

        self._state = HighlightState.idle()
        self._generation = 0
        self._listeners: List[Listener] = []
        self._timer = DismissalTimer(timer_factory)

        # Socket.IO handlers and the dismissal timer run on different threads
        self._lock = threading.RLock()

    @property
    def state(self) -> HighlightState:
        return self._state

    @property
    def dismissal_pending(self) -> bool:
        return self._timer.is_pending

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def pointer_enter(self, kind: TargetKind, entity_id: int,
                      source: EventSource = EventSource.LIST) -> HighlightState:
        """Pointer entered a list row or a marker."""
        target = HighlightTarget(TargetKind(kind), entity_id)
        with self._lock:
            self._timer.cancel()
            self._generation += 1
            if self._state.target == target:
                # Re-entering the current target keeps Hovering or Locked as is
                return self._state
            return self._transition(HighlightState.hovering(target))

    def pointer_leave(self, kind: TargetKind, entity_id: int,
                      source: EventSource = EventSource.LIST) -> HighlightState:
        """Pointer left a list row or a marker."""
        target = HighlightTarget(TargetKind(kind), entity_id)
        with self._lock:
            if self._state.mode != HighlightMode.HOVERING or self._state.target != target:
                return self._state

            if target.kind == TargetKind.POI and EventSource(source) == EventSource.MAP:
                self._start_dismissal()
                return self._state

            return self._transition(HighlightState.idle())

    def popup_enter(self) -> HighlightState:
        """Pointer reached the POI info popup before the grace period ran out."""
        with self._lock:
            self._timer.cancel()
            return self._state

    def popup_leave(self) -> HighlightState:
        with self._lock:
            if (self._state.mode == HighlightMode.HOVERING
                    and self._state.target.kind == TargetKind.POI):
                self._start_dismissal()
            return self._state

    def marker_click(self, kind: TargetKind, entity_id: int) -> HighlightState:
        """Click on a map marker; POI clicks toggle the lock."""
        target = HighlightTarget(TargetKind(kind), entity_id)
        with self._lock:
            if target.kind != TargetKind.POI:
                logger.debug(f"Ignoring click on {target.kind.value} marker {entity_id}")
                return self._state

            self._timer.cancel()
            if self._state.mode == HighlightMode.LOCKED and self._state.target == target:
                return self._transition(HighlightState.idle())
            return self._transition(HighlightState.locked(target))

    def canvas_click(self) -> HighlightState:
        """Click on the map outside any marker releases a lock."""
        with self._lock:
            if self._state.mode != HighlightMode.LOCKED:
                return self._state
            self._timer.cancel()
            return self._transition(HighlightState.idle())

    def reset(self) -> HighlightState:
        """Back to Idle, e.g. when the stop set is reloaded."""
        with self._lock:
            self._timer.cancel()
            if self._state.is_idle:
                return self._state
            return self._transition(HighlightState.idle())

    def close(self) -> None:
        with self._lock:
            self.reset()
            self._listeners.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start_dismissal(self) -> None:
        generation = self._generation
        self._timer.start(self.dismiss_delay_ms, lambda: self._dismiss(generation))

    def _dismiss(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Stale dismissal (generation {generation} != {self._generation})")
                return
            if self._state.mode != HighlightMode.HOVERING:
                return
            self._transition(HighlightState.idle())

    def _transition(self, new_state: HighlightState) -> HighlightState:
        previous = self._state
        if new_state == previous:
            return previous

        self._timer.cancel()
        self._state = new_state
        self._generation += 1
        logger.debug(f"Highlight {previous.to_dict()} -> {new_state.to_dict()}")

        for listener in list(self._listeners):
            try:
                listener(previous, new_state)
            except Exception as exc:
                logger.exception(f"Highlight listener failed: {exc}")
        return new_state
