from unittest.mock import patch

import pytest

from trip_journal.api.models import Trip
from trip_journal.highlight.session_manager import get_session_manager

from conftest import make_poi, make_stop

NAMESPACE = "/trips/ws"


def events(client, name=None):
    received = client.get_received(NAMESPACE)
    if name is None:
        return received
    return [e["args"][0] for e in received if e["name"] == name]


@pytest.fixture
def ws():
    from main import app, socketio

    client = socketio.test_client(app, namespace=NAMESPACE)
    assert client.is_connected(NAMESPACE)
    yield client
    if client.is_connected(NAMESPACE):
        client.disconnect(namespace=NAMESPACE)


@pytest.fixture
def backend():
    stops = [
        make_stop(1, 48.85, 2.35, 1, [make_poi(7, 1, 48.86, 2.34)]),
        make_stop(2, 41.90, 12.50, 2),
    ]
    with patch("trip_journal.api.supabase.fetch_trip", return_value=Trip(id=3, title="Trip")) as fetch_trip, \
            patch("trip_journal.api.supabase.fetch_stops_with_pois", return_value=stops):
        yield fetch_trip


def test_connect_announces_session(ws):
    connected = events(ws, "connected")
    assert connected[0]["status"] == "connected"
    assert get_session_manager().get_session(connected[0]["session_id"]) is not None


def test_load_trip_fits_once_and_sends_markers(ws, backend):
    events(ws)

    ws.emit("load_trip", {"trip_id": "3"}, namespace=NAMESPACE)
    received = events(ws)

    fits = [e for e in received if e["name"] == "fit_bounds"]
    assert len(fits) == 1
    assert fits[0]["args"][0]["bounds"]["north"] == 48.85

    loaded = [e["args"][0] for e in received if e["name"] == "trip_loaded"][0]
    assert loaded["trip_id"] == 3
    assert loaded["stop_count"] == 2
    assert [m["key"] for m in loaded["markers"]] == ["stop-1", "poi-7", "stop-2"]
    assert loaded["markers"][1]["photos"] == ["/photos/7.jpg"]
    assert loaded["map_options"] == {"default_zoom": 8, "min_span": 0.5, "pulse_frame_ms": 16}

    ws.emit("pointer_enter", {"kind": "stop", "id": 2, "source": "list"}, namespace=NAMESPACE)
    assert events(ws, "fit_bounds") == []


def test_load_trip_with_bad_id_reports_error(ws):
    events(ws)
    ws.emit("load_trip", {"trip_id": "nope"}, namespace=NAMESPACE)

    errors = events(ws, "error")
    assert errors == [{"message": "Invalid trip ID", "event": "load_trip", "code": "invalid_trip_id"}]


def test_load_missing_trip_reports_error(ws, backend):
    backend.return_value = None
    events(ws)

    ws.emit("load_trip", {"trip_id": 99}, namespace=NAMESPACE)

    assert events(ws, "error")[0]["message"] == "Trip 99 not found"


def test_hover_and_click_flow(ws, backend):
    ws.emit("load_trip", {"trip_id": 3}, namespace=NAMESPACE)
    events(ws)

    ws.emit("pointer_enter", {"kind": "stop", "id": 2, "source": "list"}, namespace=NAMESPACE)
    received = events(ws)
    names = [e["name"] for e in received]
    assert "set_marker_icon" in names
    assert "scroll_into_view" in names
    assert "pan_to" not in names
    states = [e["args"][0] for e in received if e["name"] == "highlight_state"]
    assert states == [{"mode": "hovering", "kind": "stop", "id": 2}]

    ws.emit("marker_click", {"kind": "poi", "id": 7}, namespace=NAMESPACE)
    assert events(ws, "highlight_state") == [{"mode": "locked", "kind": "poi", "id": 7}]

    ws.emit("get_state", namespace=NAMESPACE)
    state = events(ws, "highlight_state")[0]
    assert state["emphasized"] == ["poi-7"]
    assert state["trip_id"] == 3
    assert state["dismissal_pending"] is False

    ws.emit("canvas_click", namespace=NAMESPACE)
    assert events(ws, "highlight_state") == [{"mode": "idle", "kind": None, "id": None}]


def test_viewport_changed_controls_panning(ws, backend):
    ws.emit("load_trip", {"trip_id": 3}, namespace=NAMESPACE)
    ws.emit("viewport_changed", {"north": 45.0, "south": 40.0, "east": 13.0, "west": 11.0},
            namespace=NAMESPACE)
    events(ws)

    ws.emit("pointer_enter", {"kind": "stop", "id": 1, "source": "list"}, namespace=NAMESPACE)

    assert events(ws, "pan_to") == [{"point": {"lat": 48.85, "lng": 2.35}}]


def test_malformed_events_are_reported(ws, backend):
    ws.emit("load_trip", {"trip_id": 3}, namespace=NAMESPACE)
    events(ws)

    ws.emit("pointer_enter", {"kind": "hotel", "id": 1}, namespace=NAMESPACE)
    ws.emit("viewport_changed", {"north": 1.0}, namespace=NAMESPACE)

    errors = events(ws, "error")
    assert [e["event"] for e in errors] == ["pointer_enter", "viewport_changed"]


def test_disconnect_removes_session(ws):
    sid = events(ws, "connected")[0]["session_id"]

    ws.disconnect(namespace=NAMESPACE)

    assert get_session_manager().get_session(sid) is None


def test_popup_events_hold_and_release_poi_dismissal(ws, backend):
    ws.emit("load_trip", {"trip_id": 3}, namespace=NAMESPACE)
    ws.emit("pointer_enter", {"kind": "poi", "id": 7, "source": "map"}, namespace=NAMESPACE)
    ws.emit("pointer_leave", {"kind": "poi", "id": 7, "source": "map"}, namespace=NAMESPACE)
    events(ws)

    def state():
        ws.emit("get_state", namespace=NAMESPACE)
        return events(ws, "highlight_state")[0]

    assert state()["dismissal_pending"] is True

    ws.emit("popup_enter", namespace=NAMESPACE)
    current = state()
    assert current["dismissal_pending"] is False
    assert current["emphasized"] == ["poi-7"]

    ws.emit("popup_leave", namespace=NAMESPACE)
    assert state()["dismissal_pending"] is True
