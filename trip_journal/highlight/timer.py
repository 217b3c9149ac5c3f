# trip_journal/highlight/timer.py
"""Cancellable one-shot timer owned by a highlight coordinator."""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class DismissalTimer:
    """At most one pending callback; starting again cancels the previous one.

    ``timer_factory`` defaults to ``threading.Timer`` and may be swapped for a
    deterministic fake in tests. It is called as ``factory(seconds, callback)``
    and must return an object with ``start()`` and ``cancel()``.
    """

    def __init__(self, timer_factory: Optional[Callable] = None):
        self._factory = timer_factory or threading.Timer
        self._pending = None
        self._lock = threading.Lock()

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def start(self, delay_ms: int, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` after ``delay_ms``, replacing any pending one."""
        with self._lock:
            self._cancel_locked()

            timer = None

            def _fire():
                with self._lock:
                    if self._pending is not timer:
                        return
                    self._pending = None
                callback()

            timer = self._factory(delay_ms / 1000.0, _fire)
            if hasattr(timer, "daemon"):
                timer.daemon = True
            self._pending = timer
            timer.start()

    def cancel(self) -> bool:
        """Cancel the pending callback. Returns True if one was pending."""
        with self._lock:
            return self._cancel_locked()

    def _cancel_locked(self) -> bool:
        if self._pending is None:
            return False
        self._pending.cancel()
        self._pending = None
        logger.debug("Cancelled pending dismissal")
        return True
