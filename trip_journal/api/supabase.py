# trip_journal/api/supabase.py
"""Data access for trips, stops, POIs and profiles via the Supabase REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from trip_journal.api.config import get_supabase_config
from trip_journal.api.errors import DataServiceError
from trip_journal.api.models import Profile, Stop, Trip

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    """Network hiccups and 5xx responses are worth another attempt."""
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code >= 500
    return False


class SupabaseClient:
    """Thin wrapper around the PostgREST endpoint exposed by Supabase."""

    def __init__(self, url: str, anon_key: str, timeout: float = 10.0,
                 max_retries: int = 3, wait=None,
                 session: Optional[requests.Session] = None):
        if not url:
            raise ValueError("SUPABASE_URL not set")
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.wait = wait or wait_exponential(multiplier=0.5, max=4)

        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": anon_key,
            "Authorization": f"Bearer {anon_key}",
            "Accept": "application/json",
        })

    def select(self, table: str, **filters: Any) -> List[Dict[str, Any]]:
        """Run ``GET /rest/v1/<table>`` and return the decoded rows.

        Keyword arguments are passed through as PostgREST query parameters,
        e.g. ``select("stops", trip_id="eq.3", order="trip_stop_number.asc")``.

        Raises:
            DataServiceError: If the request keeps failing or returns 4xx
        """
        params = {"select": "*", **filters}
        url = f"{self.base_url}/{table}"

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self.max_retries),
                wait=self.wait,
                retry=retry_if_exception(_is_transient),
                reraise=True,
            ):
                with attempt:
                    response = self.session.get(url, params=params, timeout=self.timeout)
                    response.raise_for_status()
                    rows = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Supabase query on '{table}' failed: {e}")
            raise DataServiceError(f"Failed to query {table}") from e

        if not isinstance(rows, list):
            raise DataServiceError(f"Unexpected payload from {table}")
        logger.debug(f"Fetched {len(rows)} rows from {table} with {filters}")
        return rows


_client: SupabaseClient | None = None


def get_client() -> SupabaseClient:
    """Return a cached SupabaseClient built from the environment."""
    global _client
    if _client is None:
        cfg = get_supabase_config()
        _client = SupabaseClient(
            cfg["url"],
            cfg["anon_key"],
            timeout=cfg["timeout_seconds"],
            max_retries=cfg["max_retries"],
        )
        logger.info(f"Initialized Supabase client for {cfg['url']}")
    return _client


def fetch_trip(trip_id: int, client: Optional[SupabaseClient] = None) -> Optional[Trip]:
    """Return the trip or None if it does not exist.

    Raises:
        DataServiceError: If the database cannot be queried
    """
    client = client or get_client()
    rows = client.select("trips", id=f"eq.{trip_id}", limit="1")
    if not rows:
        logger.info(f"Trip {trip_id} not found")
        return None
    return Trip.from_dict(rows[0])


def fetch_stops_with_pois(trip_id: int, client: Optional[SupabaseClient] = None) -> Optional[List[Stop]]:
    """Return the trip's stops in itinerary order, each carrying its POIs.

    A failed stop query yields None. A failed POI query only empties the
    POI list of that stop so the rest of the itinerary still renders.
    """
    client = client or get_client()
    try:
        stop_rows = client.select(
            "stops", trip_id=f"eq.{trip_id}", order="trip_stop_number.asc"
        )
    except DataServiceError as e:
        logger.error(f"Error fetching stops for trip {trip_id}: {e}")
        return None

    stops = []
    for row in stop_rows:
        stop = Stop.from_dict({**row, "pois": []})
        try:
            poi_rows = client.select("pois", stop_id=f"eq.{stop.id}", order="id.asc")
        except DataServiceError as e:
            logger.error(f"Error fetching pois for stop {stop.id}: {e}")
            poi_rows = []
        stop.attach_pois(poi_rows)
        stops.append(stop)

    # Keep itinerary order even if the backend ignored the order parameter
    stops.sort(key=lambda s: s.trip_stop_number)
    return stops


def fetch_profile(user_id: int, client: Optional[SupabaseClient] = None) -> Optional[Profile]:
    """Return the owner's profile, or None when missing or unreachable."""
    client = client or get_client()
    try:
        rows = client.select("profiles", user_id=f"eq.{user_id}", limit="1")
    except DataServiceError as e:
        logger.error(f"Error fetching profile for user {user_id}: {e}")
        return None
    if not rows:
        return None
    return Profile.from_dict(rows[0])


__all__ = [
    "SupabaseClient",
    "get_client",
    "fetch_trip",
    "fetch_stops_with_pois",
    "fetch_profile",
]
