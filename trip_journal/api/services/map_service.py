# trip_journal/api/services/map_service.py
"""Service layer for map-related operations."""

import logging
import math
from typing import Any, Dict, List, Sequence

from trip_journal.api.config import get_highlight_config
from trip_journal.api.errors import InsufficientDataError, InvalidCoordinateError
from trip_journal.api.models import Bounds, LatLng, MapViewport, Stop, TargetKind
from trip_journal.api.services.styling import ROUTE_STYLE, marker_icon, polyline_style

logger = logging.getLogger(__name__)


class MapService:
    """Derives viewports, markers and polylines from an itinerary."""

    @staticmethod
    def validate_coordinates(lat: float, lng: float) -> bool:
        """Validate that coordinates are finite and within valid ranges.

        Args:
            lat: Latitude
            lng: Longitude

        Returns:
            True if valid, False otherwise
        """
        try:
            if not (math.isfinite(lat) and math.isfinite(lng)):
                return False
        except TypeError:
            return False
        return -90 <= lat <= 90 and -180 <= lng <= 180

    @staticmethod
    def mappable_stops(stops: Sequence[Stop]) -> List[Stop]:
        """Return the stops whose coordinates can be placed on the map.

        Order is preserved; unplaceable stops are logged and skipped.
        """
        valid = []
        for stop in stops:
            if MapService.validate_coordinates(stop.latitude, stop.longitude):
                valid.append(stop)
            else:
                logger.warning(
                    f"Skipping stop {stop.id} with invalid coordinates "
                    f"({stop.latitude}, {stop.longitude})"
                )
        return valid

    @staticmethod
    def calculate_viewport(stops: Sequence[Stop]) -> MapViewport:
        """Calculate the bounding box and center point for a set of stops.

        Args:
            stops: Non-empty sequence of stops

        Returns:
            MapViewport whose bounds enclose every stop

        Raises:
            InsufficientDataError: If ``stops`` is empty
            InvalidCoordinateError: If any coordinate is NaN or infinite
        """
        if not stops:
            raise InsufficientDataError("Cannot compute a viewport without stops")

        lats = []
        lngs = []
        for stop in stops:
            lat, lng = stop.latitude, stop.longitude
            if not (math.isfinite(lat) and math.isfinite(lng)):
                raise InvalidCoordinateError(
                    f"Stop {stop.id} has non-finite coordinates ({lat}, {lng})"
                )
            lats.append(lat)
            lngs.append(lng)

        min_lat, max_lat = min(lats), max(lats)
        min_lng, max_lng = min(lngs), max(lngs)

        return MapViewport(
            center=LatLng((min_lat + max_lat) / 2, (min_lng + max_lng) / 2),
            bounds=Bounds(north=max_lat, south=min_lat, east=max_lng, west=min_lng),
        )

    @staticmethod
    def build_markers(stops: Sequence[Stop]) -> List[Dict[str, Any]]:
        """Initial (non-emphasized) marker payloads for every stop and POI."""
        markers = []
        for stop in stops:
            label = str(stop.trip_stop_number or stop.id)
            markers.append({
                "key": f"{TargetKind.STOP.value}-{stop.id}",
                "kind": TargetKind.STOP.value,
                "id": stop.id,
                "title": stop.name,
                "position": stop.position.to_dict(),
                "icon": marker_icon(TargetKind.STOP, stop.id, None, False, label=label),
            })
            for poi in stop.pois:
                if not MapService.validate_coordinates(poi.latitude, poi.longitude):
                    logger.warning(f"Skipping POI {poi.id} with invalid coordinates")
                    continue
                markers.append({
                    "key": f"{TargetKind.POI.value}-{poi.id}",
                    "kind": TargetKind.POI.value,
                    "id": poi.id,
                    "stop_id": stop.id,
                    "title": poi.name,
                    "category": poi.category,
                    "photos": list(poi.photos),
                    "position": poi.position.to_dict(),
                    "icon": marker_icon(TargetKind.POI, poi.id, poi.category, False),
                })
        return markers

    @staticmethod
    def build_polylines(stops: Sequence[Stop]) -> List[Dict[str, Any]]:
        """Route line through the stops plus one spoke per POI.

        Spokes are always visible, not only for the active stop.
        """
        polylines = [{
            "key": "route",
            "path": [stop.position.to_dict() for stop in stops],
            "options": dict(ROUTE_STYLE),
        }]
        for stop in stops:
            for poi in stop.pois:
                if not MapService.validate_coordinates(poi.latitude, poi.longitude):
                    continue
                polylines.append({
                    "key": f"{TargetKind.POI.value}-{poi.id}",
                    "path": [stop.position.to_dict(), poi.position.to_dict()],
                    "options": polyline_style(poi.category),
                })
        return polylines

    @staticmethod
    def map_options(config=None) -> Dict[str, Any]:
        """Zoom, padding and pulse frame length the browser applies locally."""
        config = config or get_highlight_config()
        return {
            "default_zoom": config["default_zoom"],
            "min_span": config["min_span_degrees"],
            "pulse_frame_ms": config["pulse_frame_ms"],
        }

    @staticmethod
    def build_map_model(stops: Sequence[Stop]) -> Dict[str, Any]:
        """Everything the browser needs to draw the trip map.

        Callers must only invoke this once stops have loaded; an empty stop
        list raises InsufficientDataError from ``calculate_viewport``.
        """
        viewport = MapService.calculate_viewport(stops)
        return {
            **viewport.to_dict(),
            **MapService.map_options(),
            "markers": MapService.build_markers(stops),
            "polylines": MapService.build_polylines(stops),
        }


# Export for use in other modules
__all__ = ['MapService']
