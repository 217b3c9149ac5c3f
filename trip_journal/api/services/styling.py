# trip_journal/api/services/styling.py
"""Category styling for map markers, itinerary rows and connecting lines."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote

from trip_journal.api.models import PoiCategory, TargetKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryStyle:
    color: str
    glyph: str  # SVG path on a 24x24 grid
    label: str

    def to_dict(self) -> dict:
        return {"color": self.color, "glyph": self.glyph, "label": self.label}


CATEGORY_STYLES: Dict[str, CategoryStyle] = {
    PoiCategory.FOOD.value: CategoryStyle(
        color="#f59e0b",
        glyph="M12,2A3,3,0,0,0,9,5V8H7V5A3,3,0,0,0,1,5V8A3,3,0,0,0,4,11V22H8V11A3,3,0,0,0,11,8V5A3,3,0,0,0,12,2M16,2A3,3,0,0,0,13,5V8H15V5A1,1,0,0,1,17,5V8H19V5A3,3,0,0,0,16,2M22,19H14V22H22V19Z",
        label="Food",
    ),
    PoiCategory.HIKE.value: CategoryStyle(
        color="#10b981",
        glyph="M13.5,5.5C14.59,5.5 15.5,4.58 15.5,3.5C15.5,2.38 14.59,1.5 13.5,1.5C12.39,1.5 11.5,2.38 11.5,3.5C11.5,4.58 12.39,5.5 13.5,5.5M9.8,8.9L7,23H9.1L10.9,15L13,17V23H15V15.5L12.9,13.5L13.5,10.5C14.8,12 16.8,13 19,13V11C17.1,11 15.5,10 14.7,8.6L13.7,7C13.3,6.4 12.7,6 12,6C11.7,6 11.5,6.1 11.2,6.1L6,8.3V13H8V9.6L9.8,8.9M13,1.5",
        label="Hike",
    ),
    PoiCategory.SHOP.value: CategoryStyle(
        color="#3b82f6",
        glyph="M19 6H17C17 3.2 14.8 1 12 1S7 3.2 7 6H5C3.9 6 3 6.9 3 8V20C3 21.1 3.9 22 5 22H19C20.1 22 21 21.1 21 20V8C21 6.9 20.1 6 19 6M12 3C13.7 3 15 4.3 15 6H9C9 4.3 10.3 3 12 3M19 20H5V8H19V20M12 12C10.3 12 9 10.7 9 9H7C7 11.8 9.2 14 12 14S17 11.8 17 9H15C15 10.7 13.7 12 12 12Z",
        label="Shop",
    ),
    PoiCategory.CULTURAL_CENTER.value: CategoryStyle(
        color="#8b5cf6",
        glyph="M12,3L1,9L12,15L21,10.09V17H23V9M5,13.18V17.18L12,21L19,17.18V13.18L12,17L5,13.18Z",
        label="Cultural Center",
    ),
    PoiCategory.MUSEUM.value: CategoryStyle(
        color="#64748b",
        glyph="M12,0L3,5V7H21V5M5,9V21H8V9M10,9V21H14V9M16,9V21H19V9",
        label="Museum",
    ),
    PoiCategory.NATURE_SIGHT.value: CategoryStyle(
        color="#22c55e",
        glyph="M14,6L10.25,11L13.1,14.8L11.5,16C9.81,13.75 7,10 7,10L1,18H23L14,6Z",
        label="Nature Sight",
    ),
    PoiCategory.URBAN_SIGHT.value: CategoryStyle(
        color="#71717a",
        glyph="M15,11V5L12,2L9,5V7H3V21H21V11H15M7,19H5V17H7V19M7,15H5V13H7V15M7,11H5V9H7V11M13,19H11V17H13V19M13,15H11V13H13V15M13,11H11V9H13V11M13,7H11V5H13V7M19,19H17V17H19V19M19,15H17V13H19V15Z",
        label="Urban Sight",
    ),
}

FALLBACK_STYLE = CategoryStyle(
    color="#9ca3af",
    glyph="M12,2C8.13,2 5,5.13 5,9C5,14.25 12,22 12,22S19,14.25 19,9C19,5.13 15.87,2 12,2M12,11.5A2.5,2.5 0 0,1 9.5,9A2.5,2.5 0 0,1 12,6.5A2.5,2.5 0 0,1 14.5,9A2.5,2.5 0 0,1 12,11.5Z",
    label="Other",
)

# Stop markers ignore the palette above
STOP_COLOR = "#333333"
STOP_EMPHASIZED_COLOR = "#000000"

STOP_SIZE, STOP_EMPHASIZED_SIZE = 32, 40
POI_SIZE, POI_EMPHASIZED_SIZE = 24, 32

ROUTE_STYLE = {
    "strokeColor": "#000000",
    "strokeOpacity": 1,
    "strokeWeight": 3,
}


def style(category: Optional[str]) -> CategoryStyle:
    """Resolve a POI category to its color, glyph and label.

    Categories come from user data, so anything unrecognised (including
    ``None``) resolves to ``FALLBACK_STYLE`` instead of raising.
    """
    if isinstance(category, PoiCategory):
        category = category.value
    resolved = CATEGORY_STYLES.get(category) if isinstance(category, str) else None
    if resolved is None:
        logger.debug(f"Unknown POI category {category!r}, using fallback style")
        return FALLBACK_STYLE
    return resolved


def lighten_color(color: str, amount: int) -> str:
    """Add ``amount`` to each RGB channel of a ``#rrggbb`` color, capped at 255."""
    hex_value = color.lstrip("#")
    channels = [int(hex_value[i:i + 2], 16) for i in range(0, 6, 2)]
    return "#" + "".join(f"{min(255, c + amount):02x}" for c in channels)


def _svg_frame(size: int, color: str, body: str) -> str:
    half = size / 2
    return (
        f'<svg width="{size}" height="{size}" viewBox="0 0 {size} {size}" '
        'xmlns="http://www.w3.org/2000/svg">'
        '<defs><filter id="shadow" x="-20%" y="-20%" width="140%" height="140%">'
        '<feDropShadow dx="0" dy="1" stdDeviation="2" flood-opacity="0.3"/>'
        '</filter></defs>'
        f'<circle cx="{half:g}" cy="{half:g}" r="{half - 2:g}" fill="white" filter="url(#shadow)"/>'
        f'<circle cx="{half:g}" cy="{half:g}" r="{half - 4:g}" fill="{color}"/>'
        f"{body}</svg>"
    )


def _data_uri(svg: str) -> str:
    return "data:image/svg+xml;charset=UTF-8," + quote(svg, safe="-_.!~*'()")


def marker_icon(kind: TargetKind, entity_id: int, category: Optional[str],
                emphasized: bool, label: Optional[str] = None) -> dict:
    """Build the icon description handed to the map surface for one marker.

    Stops render a numeric label on a dark disc; POIs render their category
    glyph on the category color, lightened while not emphasized.
    """
    if kind == TargetKind.STOP:
        size = STOP_EMPHASIZED_SIZE if emphasized else STOP_SIZE
        color = STOP_EMPHASIZED_COLOR if emphasized else STOP_COLOR
        text = label if label is not None else str(entity_id)
        body = (
            f'<text x="{size / 2:g}" y="{size / 2:g}" font-family="Arial, sans-serif" '
            f'font-size="{size / 2:g}" font-weight="bold" fill="white" '
            f'text-anchor="middle" dominant-baseline="central">{text}</text>'
        )
    else:
        resolved = style(category)
        size = POI_EMPHASIZED_SIZE if emphasized else POI_SIZE
        color = resolved.color if emphasized else lighten_color(resolved.color, 20)
        icon_size = size * 0.5
        offset = (size - icon_size) / 2
        body = (
            f'<g transform="translate({offset:g}, {offset:g}) scale({icon_size / 24:g})">'
            f'<path d="{resolved.glyph}" fill="white"/></g>'
        )

    return {
        "url": _data_uri(_svg_frame(size, color, body)),
        "size": size,
        "anchor": size / 2,
        "color": color,
    }


def polyline_style(category: Optional[str]) -> dict:
    """Dashed line joining a stop to one of its POIs."""
    return {
        "strokeColor": style(category).color,
        "strokeOpacity": 0.5,
        "strokeWeight": 1.5,
        "icons": [{
            "icon": {"path": "M 0,-1 0,1", "strokeOpacity": 1, "scale": 3},
            "offset": "0",
            "repeat": "10px",
        }],
    }


__all__ = [
    "CategoryStyle",
    "CATEGORY_STYLES",
    "FALLBACK_STYLE",
    "ROUTE_STYLE",
    "style",
    "lighten_color",
    "marker_icon",
    "polyline_style",
]
