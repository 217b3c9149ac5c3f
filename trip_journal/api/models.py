"""Shared data structures for trips, itineraries and the map view.

Every layer (data access, services, highlight engine and routes) builds on
these dataclasses, so rows coming back from the database are parsed once
here and nowhere else.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def _coordinate(value: Any) -> float:
    """Parse a coordinate column; missing or malformed values become NaN.

    NaN positions are dropped later by ``MapService.validate_coordinates``.
    """
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


class PoiCategory(str, Enum):
    FOOD = "food"
    HIKE = "hike"
    SHOP = "shop"
    CULTURAL_CENTER = "cultural_center"
    MUSEUM = "museum"
    NATURE_SIGHT = "nature_sight"
    URBAN_SIGHT = "urban_sight"


class TargetKind(str, Enum):
    STOP = "stop"
    POI = "poi"


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Bounds:
    """Geographic rectangle; ``north >= south`` and ``east >= west``."""

    north: float
    south: float
    east: float
    west: float

    @property
    def center(self) -> LatLng:
        return LatLng((self.north + self.south) / 2, (self.east + self.west) / 2)

    def contains(self, point: LatLng) -> bool:
        return (
            self.south <= point.lat <= self.north
            and self.west <= point.lng <= self.east
        )

    def pan_to(self, point: LatLng) -> "Bounds":
        """Return a box of the same span centred on ``point``."""
        half_lat = (self.north - self.south) / 2
        half_lng = (self.east - self.west) / 2
        return Bounds(
            north=point.lat + half_lat,
            south=point.lat - half_lat,
            east=point.lng + half_lng,
            west=point.lng - half_lng,
        )

    def with_min_span(self, min_span: float) -> "Bounds":
        """Grow a narrow side around its center until it spans ``min_span`` degrees."""
        north, south, east, west = self.north, self.south, self.east, self.west
        if north - south < min_span:
            mid = (north + south) / 2
            north, south = mid + min_span / 2, mid - min_span / 2
        if east - west < min_span:
            mid = (east + west) / 2
            east, west = mid + min_span / 2, mid - min_span / 2
        return Bounds(north=north, south=south, east=east, west=west)

    def to_dict(self) -> dict:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bounds":
        return cls(
            north=float(data["north"]),
            south=float(data["south"]),
            east=float(data["east"]),
            west=float(data["west"]),
        )


@dataclass(frozen=True)
class MapViewport:
    center: LatLng
    bounds: Bounds

    def to_dict(self) -> dict:
        return {"center": self.center.to_dict(), "bounds": self.bounds.to_dict()}


@dataclass(frozen=True)
class HighlightTarget:
    """The stop or POI currently emphasized on both the list and the map."""

    kind: TargetKind
    id: int

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "id": self.id}


@dataclass
class Trip:
    id: int
    title: str
    description: Optional[str] = None
    header_image_url: Optional[str] = None
    user_id: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "Trip":
        return cls(
            id=int(row["id"]),
            title=row.get("title") or "",
            description=row.get("description"),
            header_image_url=row.get("header_image_url"),
            user_id=row.get("user_id"),
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "header_image_url": self.header_image_url,
            "user_id": self.user_id,
            "created_at": self.created_at,
        }


@dataclass
class PointOfInterest:
    id: int
    stop_id: int
    name: str
    latitude: float
    longitude: float
    category: str  # one of PoiCategory, but kept verbatim when unknown
    trip_id: Optional[int] = None
    description: Optional[str] = None
    photos: List[str] = field(default_factory=list)

    @property
    def position(self) -> LatLng:
        return LatLng(self.latitude, self.longitude)

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "PointOfInterest":
        # Older rows store photos under "images"
        photos = row.get("photos")
        if photos is None:
            photos = row.get("images")
        return cls(
            id=int(row["id"]),
            stop_id=int(row["stop_id"]),
            trip_id=row.get("trip_id"),
            name=row.get("name") or "",
            description=row.get("description"),
            latitude=_coordinate(row.get("latitude")),
            longitude=_coordinate(row.get("longitude")),
            category=row.get("category") or "",
            photos=list(photos or []),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "stop_id": self.stop_id,
            "trip_id": self.trip_id,
            "name": self.name,
            "description": self.description,
            "latitude": _finite_or_none(self.latitude),
            "longitude": _finite_or_none(self.longitude),
            "category": self.category,
            "photos": list(self.photos),
        }


@dataclass
class Stop:
    """A waypoint in a trip's itinerary."""

    id: int
    trip_id: int
    name: str
    latitude: float
    longitude: float
    trip_stop_number: int
    description: Optional[str] = None
    nights: int = 0
    pois: List[PointOfInterest] = field(default_factory=list)

    @property
    def position(self) -> LatLng:
        return LatLng(self.latitude, self.longitude)

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "Stop":
        stop = cls(
            id=int(row["id"]),
            trip_id=int(row["trip_id"]),
            name=row.get("name") or "",
            description=row.get("description"),
            latitude=_coordinate(row.get("latitude")),
            longitude=_coordinate(row.get("longitude")),
            nights=int(row.get("nights") or 0),
            trip_stop_number=int(row.get("trip_stop_number") or 0),
        )
        stop.attach_pois(row.get("pois") or [])
        return stop

    def attach_pois(self, rows: List[Dict[str, Any]]) -> None:
        """Parse POI rows, keeping only those that belong to this stop."""
        pois = []
        for row in rows:
            poi = row if isinstance(row, PointOfInterest) else PointOfInterest.from_dict(row)
            if poi.stop_id != self.id:
                logger.warning(f"Dropping POI {poi.id}: stop_id {poi.stop_id} != stop {self.id}")
                continue
            pois.append(poi)
        self.pois = pois

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "trip_id": self.trip_id,
            "name": self.name,
            "description": self.description,
            "latitude": _finite_or_none(self.latitude),
            "longitude": _finite_or_none(self.longitude),
            "nights": self.nights,
            "trip_stop_number": self.trip_stop_number,
            "pois": [poi.to_dict() for poi in self.pois],
        }


@dataclass
class Profile:
    user_id: int
    name: str
    username: str
    avatar_url: Optional[str] = None

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "Profile":
        return cls(
            user_id=int(row["user_id"]),
            name=row.get("name") or "",
            username=row.get("username") or "",
            avatar_url=row.get("avatar_url") or row.get("avatarUrl"),
        )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "username": self.username,
            "avatar_url": self.avatar_url,
        }

