# trip_journal/api/services/trip_service.py
"""Service layer for loading a trip page."""

import logging
from typing import Any, Dict, List, Optional

from trip_journal.api import supabase
from trip_journal.api.errors import InvalidTripIdError, TripNotFoundError
from trip_journal.api.models import Stop
from trip_journal.api.services.map_service import MapService

logger = logging.getLogger(__name__)


class TripService:
    """Assembles the trip, its itinerary and its map model."""

    @staticmethod
    def parse_trip_id(raw: Any) -> int:
        """Turn a path or event parameter into a trip id.

        Args:
            raw: Value received at the boundary (str, int or None)

        Returns:
            Positive integer trip id

        Raises:
            InvalidTripIdError: If the value is missing or not a positive integer
        """
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise InvalidTripIdError("Trip ID is required")
        if isinstance(raw, bool):
            raise InvalidTripIdError("Invalid trip ID")
        try:
            trip_id = int(str(raw).strip())
        except ValueError:
            raise InvalidTripIdError("Invalid trip ID")
        if trip_id <= 0:
            raise InvalidTripIdError("Invalid trip ID")
        return trip_id

    @staticmethod
    def load_stops(trip_id: int) -> List[Stop]:
        """Fetch the itinerary; a missing itinerary is an empty one."""
        stops = supabase.fetch_stops_with_pois(trip_id)
        if stops is None:
            logger.warning(f"No stops available for trip {trip_id}")
            return []
        return stops

    @staticmethod
    def build_map(stops: List[Stop]) -> Optional[Dict[str, Any]]:
        """Map model for the stops, or None while there is nothing to place.

        The viewport calculator must never see an empty stop list.
        """
        mappable = MapService.mappable_stops(stops)
        if not mappable:
            return None
        return MapService.build_map_model(mappable)

    @staticmethod
    def load_trip_page(raw_trip_id: Any) -> Dict[str, Any]:
        """Load everything the trip page renders.

        Args:
            raw_trip_id: Trip id as received from the client

        Returns:
            Dictionary with trip, stops, profile and map entries

        Raises:
            InvalidTripIdError: If the id is malformed
            TripNotFoundError: If the trip does not exist
            DataServiceError: If the database cannot be reached
        """
        trip_id = TripService.parse_trip_id(raw_trip_id)

        trip = supabase.fetch_trip(trip_id)
        if trip is None:
            raise TripNotFoundError(f"Trip {trip_id} not found")

        stops = TripService.load_stops(trip_id)
        profile = supabase.fetch_profile(trip.user_id) if trip.user_id is not None else None

        logger.info(
            f"Loaded trip {trip_id} with {len(stops)} stops and "
            f"{sum(len(s.pois) for s in stops)} POIs"
        )

        return {
            "trip": trip.to_dict(),
            "stops": [stop.to_dict() for stop in stops],
            "profile": profile.to_dict() if profile else None,
            "map": TripService.build_map(stops),
        }


__all__ = ['TripService']
