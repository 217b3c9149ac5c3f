import math
from datetime import datetime, timedelta

import pytest

from trip_journal.api.models import TargetKind
from trip_journal.highlight.coordinator import EventSource
from trip_journal.highlight.session_manager import HighlightSession, HighlightSessionManager

from conftest import RecordingSurface, make_stop


@pytest.fixture
def manager(highlight_config):
    highlight_config.update(max_sessions=2, session_timeout_seconds=60)
    return HighlightSessionManager(config=highlight_config, start_cleanup=False)


def test_create_reuses_existing_session(manager):
    first = manager.create_session("a", "10.0.0.1", RecordingSurface())
    again = manager.create_session("a", "10.0.0.1", RecordingSurface())
    assert first is again
    assert manager.get_stats()["total_sessions"] == 1


def test_capacity_limit(manager):
    assert manager.create_session("a", "ip", RecordingSurface())
    assert manager.create_session("b", "ip", RecordingSurface())
    assert manager.create_session("c", "ip", RecordingSurface()) is None


def test_remove_session_cancels_pending_dismissal(manager, stops, timers):
    session = manager.create_session("a", "ip", RecordingSurface(), timer_factory=timers)
    session.load_stops(1, stops)
    session.coordinator.pointer_enter(TargetKind.POI, 7, EventSource.MAP)
    session.coordinator.pointer_leave(TargetKind.POI, 7, EventSource.MAP)

    manager.remove_session("a", "test")

    assert timers.last.cancelled
    assert manager.get_session("a") is None
    assert len(session.registry) == 0


def test_cleanup_drops_idle_sessions(manager):
    stale = manager.create_session("old", "ip", RecordingSurface())
    manager.create_session("new", "ip", RecordingSurface())
    stale.last_activity = datetime.now() - timedelta(seconds=120)

    assert manager.cleanup_expired_sessions() == 1
    assert manager.get_session("old") is None
    assert manager.get_session("new") is not None


def test_stats_report_loaded_trips(manager, stops):
    session = manager.create_session("a", "ip", RecordingSurface())
    session.load_stops(4, stops)
    session.touch()

    stats = manager.get_stats()
    assert stats["trips"] == [4]
    assert stats["total_events"] == 1
    assert stats["config"]["max_sessions"] == 2


def test_load_stops_fits_once_and_registers_markers(stops, surface, timers, highlight_config):
    session = HighlightSession("s", "ip", surface, config=highlight_config, timer_factory=timers)

    viewport = session.load_stops(1, stops)

    assert surface.named("fit_bounds") == [("fit_bounds", viewport.bounds)]
    assert len(session.registry) == 5
    assert session.registry.get(TargetKind.STOP, 2).label == "2"
    assert session.registry.get(TargetKind.STOP, 2).category is None

    surface.reset()
    for _ in range(3):
        session.coordinator.pointer_enter(TargetKind.STOP, 1, EventSource.LIST)
        session.coordinator.pointer_enter(TargetKind.POI, 8, EventSource.LIST)
    assert surface.named("fit_bounds") == []


def test_reload_resets_state_and_replaces_markers(session, surface):
    session.coordinator.marker_click(TargetKind.POI, 7)

    session.load_stops(2, [make_stop(5, 35.68, 139.69, 1)])

    assert session.coordinator.state.is_idle
    assert [e.key for e in session.registry] == [(TargetKind.STOP, 5)]
    assert session.registry.emphasized() == []
    assert session.trip_id == 2
    assert len(surface.named("fit_bounds")) == 1


def test_load_without_mappable_stops_skips_fit(surface, timers, highlight_config):
    session = HighlightSession("s", "ip", surface, config=highlight_config, timer_factory=timers)

    viewport = session.load_stops(1, [make_stop(1, math.nan, 2.0, 1)])

    assert viewport is None
    assert session.renderer.visible_bounds is None
    assert surface.calls == []
    assert len(session.registry) == 0
