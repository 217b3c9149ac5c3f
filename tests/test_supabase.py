from unittest.mock import MagicMock

import pytest
import requests
from tenacity import wait_none

from trip_journal.api import supabase
from trip_journal.api.errors import DataServiceError
from trip_journal.api.services.map_service import MapService
from trip_journal.api.supabase import SupabaseClient


def make_response(payload=None, status=200):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status} error", response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


def make_client(*responses, max_retries=3):
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = list(responses)
    client = SupabaseClient(
        "https://example.supabase.co/", "anon-key",
        max_retries=max_retries, wait=wait_none(), session=session,
    )
    return client, session


def test_select_builds_postgrest_request():
    client, session = make_client(make_response([{"id": 1}]))

    rows = client.select("trips", id="eq.1", limit="1")

    assert rows == [{"id": 1}]
    args, kwargs = session.get.call_args
    assert args[0] == "https://example.supabase.co/rest/v1/trips"
    assert kwargs["params"] == {"select": "*", "id": "eq.1", "limit": "1"}
    assert session.headers["apikey"] == "anon-key"
    assert session.headers["Authorization"] == "Bearer anon-key"


def test_select_retries_server_errors():
    client, session = make_client(
        make_response(status=503), make_response(status=502), make_response([{"id": 2}])
    )

    assert client.select("trips") == [{"id": 2}]
    assert session.get.call_count == 3


def test_select_retries_connection_errors():
    client, session = make_client(requests.ConnectionError("reset"), make_response([]))

    assert client.select("stops") == []
    assert session.get.call_count == 2


def test_select_gives_up_after_max_retries():
    client, session = make_client(*[make_response(status=500)] * 2, max_retries=2)

    with pytest.raises(DataServiceError):
        client.select("trips")
    assert session.get.call_count == 2


def test_client_errors_are_not_retried():
    client, session = make_client(make_response(status=401), make_response([]))

    with pytest.raises(DataServiceError):
        client.select("trips")
    assert session.get.call_count == 1


def test_non_list_payload_is_rejected():
    client, _ = make_client(make_response({"message": "oops"}))
    with pytest.raises(DataServiceError):
        client.select("trips")


def test_missing_url_is_a_configuration_error():
    with pytest.raises(ValueError):
        SupabaseClient("", "key", session=MagicMock())


def stop_row(stop_id, number):
    return {
        "id": stop_id, "trip_id": 3, "name": f"Stop {stop_id}",
        "latitude": 48.0 + stop_id, "longitude": 2.0, "trip_stop_number": number,
    }


def poi_row(poi_id, stop_id, **extra):
    return {
        "id": poi_id, "stop_id": stop_id, "name": f"POI {poi_id}",
        "latitude": 48.5, "longitude": 2.5, "category": "food", **extra,
    }


def test_fetch_trip_returns_none_when_missing():
    client = MagicMock()
    client.select.return_value = []
    assert supabase.fetch_trip(3, client=client) is None


def test_fetch_trip_propagates_service_errors():
    client = MagicMock()
    client.select.side_effect = DataServiceError("down")
    with pytest.raises(DataServiceError):
        supabase.fetch_trip(3, client=client)


def test_fetch_stops_sorted_with_pois_attached():
    client = MagicMock()

    def select(table, **filters):
        if table == "stops":
            return [stop_row(2, 2), stop_row(1, 1)]
        if filters["stop_id"] == "eq.1":
            return [poi_row(10, 1, images=["a.jpg"]), poi_row(11, 2)]
        return [poi_row(12, 2)]

    client.select.side_effect = select

    stops = supabase.fetch_stops_with_pois(3, client=client)

    assert [s.id for s in stops] == [1, 2]
    assert [p.id for p in stops[0].pois] == [10]
    assert stops[0].pois[0].photos == ["a.jpg"]
    assert [p.id for p in stops[1].pois] == [12]


def test_failed_poi_query_only_empties_that_stop():
    client = MagicMock()

    def select(table, **filters):
        if table == "stops":
            return [stop_row(1, 1), stop_row(2, 2)]
        if filters["stop_id"] == "eq.1":
            raise DataServiceError("pois down")
        return [poi_row(12, 2)]

    client.select.side_effect = select

    stops = supabase.fetch_stops_with_pois(3, client=client)

    assert stops[0].pois == []
    assert [p.id for p in stops[1].pois] == [12]


def test_failed_stop_query_returns_none():
    client = MagicMock()
    client.select.side_effect = DataServiceError("stops down")
    assert supabase.fetch_stops_with_pois(3, client=client) is None


def test_fetch_profile_tolerates_failure():
    client = MagicMock()
    client.select.side_effect = DataServiceError("down")
    assert supabase.fetch_profile(5, client=client) is None

    client.select.side_effect = None
    client.select.return_value = [{"user_id": 5, "name": "Ada", "username": "ada"}]
    assert supabase.fetch_profile(5, client=client).username == "ada"


def test_rows_with_missing_coordinates_are_kept_but_unmappable():
    client = MagicMock()

    def select(table, **filters):
        if table == "stops":
            return [stop_row(1, 1), {**stop_row(2, 2), "latitude": None}]
        return [poi_row(10, 1, latitude=None), poi_row(11, 1, longitude="n/a"), poi_row(12, 1)]

    client.select.side_effect = select

    stops = supabase.fetch_stops_with_pois(3, client=client)

    assert [s.id for s in stops] == [1, 2]
    assert [p.id for p in stops[0].pois] == [10, 11, 12]
    assert [s.id for s in MapService.mappable_stops(stops)] == [1]
    assert [m["key"] for m in MapService.build_markers(stops[:1])] == ["stop-1", "poi-12"]
    assert stops[1].to_dict()["latitude"] is None
    assert stops[0].pois[0].to_dict()["latitude"] is None
