"""Shared fixtures: sample itinerary, a fake timer and a recording map surface."""

import pytest

from trip_journal.api.config import get_highlight_config
from trip_journal.api.models import PointOfInterest, Stop
from trip_journal.highlight.session_manager import HighlightSession
from trip_journal.highlight.surface import MapSurface


class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def run(self):
        """Invoke the callback regardless of state, as a late thread would."""
        self.fired = True
        self.callback()

    def fire(self):
        if self.started and not self.cancelled and not self.fired:
            self.run()


class TimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, callback):
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self):
        return self.timers[-1]

    def pending(self):
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]


class RecordingSurface(MapSurface):
    def __init__(self):
        self.calls = []

    def fit_bounds(self, bounds):
        self.calls.append(("fit_bounds", bounds))

    def pan_to(self, point):
        self.calls.append(("pan_to", point))

    def set_marker_icon(self, key, icon, pulse=None):
        self.calls.append(("set_marker_icon", key, icon, pulse))

    def set_marker_z_order(self, key, z_index):
        self.calls.append(("set_marker_z_order", key, z_index))

    def scroll_into_view(self, kind, entity_id):
        self.calls.append(("scroll_into_view", kind, entity_id))

    def set_row_pulse(self, kind, entity_id, active):
        self.calls.append(("set_row_pulse", kind, entity_id, active))

    def named(self, name):
        return [c for c in self.calls if c[0] == name]

    def reset(self):
        self.calls.clear()


def make_stop(stop_id, lat, lng, number, pois=()):
    return Stop(
        id=stop_id,
        trip_id=1,
        name=f"Stop {stop_id}",
        latitude=lat,
        longitude=lng,
        trip_stop_number=number,
        nights=2,
        pois=list(pois),
    )


def make_poi(poi_id, stop_id, lat, lng, category="food"):
    return PointOfInterest(
        id=poi_id,
        stop_id=stop_id,
        trip_id=1,
        name=f"POI {poi_id}",
        latitude=lat,
        longitude=lng,
        category=category,
        photos=[f"/photos/{poi_id}.jpg"],
    )


@pytest.fixture
def stops():
    """Paris then Rome, with two POIs in Paris and one in Rome."""
    return [
        make_stop(1, 48.85, 2.35, 1, [
            make_poi(7, 1, 48.86, 2.34, "food"),
            make_poi(8, 1, 48.87, 2.33, "museum"),
        ]),
        make_stop(2, 41.90, 12.50, 2, [
            make_poi(9, 2, 41.89, 12.49, "campsite"),
        ]),
    ]


@pytest.fixture
def timers():
    return TimerFactory()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def highlight_config():
    config = get_highlight_config()
    config.update(dismiss_delay_ms=1500, pulse_duration_ms=300, pulse_frame_ms=16)
    return config


@pytest.fixture
def session(stops, surface, timers, highlight_config):
    """A loaded highlight session with its initial fit already recorded."""
    highlight_session = HighlightSession(
        "sid-1", "127.0.0.1", surface, config=highlight_config, timer_factory=timers
    )
    highlight_session.load_stops(1, stops)
    surface.reset()
    return highlight_session
