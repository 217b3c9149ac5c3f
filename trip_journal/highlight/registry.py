# trip_journal/highlight/registry.py
"""Render state for every marker on the trip map."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from trip_journal.api.models import LatLng, TargetKind
from trip_journal.api.services.styling import marker_icon

logger = logging.getLogger(__name__)

MarkerKey = Tuple[TargetKind, int]


def marker_key_str(kind: TargetKind, entity_id: int) -> str:
    """Key used by the browser, e.g. ``"poi-7"``."""
    return f"{TargetKind(kind).value}-{entity_id}"


@dataclass
class MarkerEntry:
    kind: TargetKind
    id: int
    position: LatLng
    category: Optional[str] = None
    label: Optional[str] = None
    is_emphasized: bool = False

    @property
    def key(self) -> MarkerKey:
        return (self.kind, self.id)

    @property
    def base_icon(self) -> dict:
        return marker_icon(self.kind, self.id, self.category, False, label=self.label)

    def icon(self) -> dict:
        return marker_icon(self.kind, self.id, self.category, self.is_emphasized, label=self.label)


class MarkerRegistry:
    """Dumb store of marker entries keyed by ``(kind, id)``.

    It does not enforce single emphasis; the renderer does that from the
    coordinator's state.
    """

    def __init__(self):
        self._entries: Dict[MarkerKey, MarkerEntry] = {}

    def register(self, kind: TargetKind, entity_id: int, position: LatLng,
                 category: Optional[str] = None, label: Optional[str] = None) -> MarkerEntry:
        """Add or replace the entry for ``(kind, entity_id)``."""
        kind = TargetKind(kind)
        entry = MarkerEntry(
            kind=kind,
            id=entity_id,
            position=position,
            category=category if kind == TargetKind.POI else None,
            label=label,
        )
        self._entries[entry.key] = entry
        return entry

    def unregister(self, kind: TargetKind, entity_id: int) -> Optional[MarkerEntry]:
        return self._entries.pop((TargetKind(kind), entity_id), None)

    def clear(self) -> None:
        self._entries.clear()

    def get(self, kind: TargetKind, entity_id: int) -> Optional[MarkerEntry]:
        return self._entries.get((TargetKind(kind), entity_id))

    def set_emphasis(self, kind: TargetKind, entity_id: int, emphasized: bool) -> bool:
        """Toggle emphasis. Unknown keys are ignored and return False."""
        entry = self._entries.get((TargetKind(kind), entity_id))
        if entry is None:
            logger.debug(f"Ignoring emphasis for unregistered marker {kind}-{entity_id}")
            return False
        entry.is_emphasized = emphasized
        return True

    def emphasized(self) -> List[MarkerEntry]:
        return [e for e in self._entries.values() if e.is_emphasized]

    def entries(self) -> List[MarkerEntry]:
        return list(self._entries.values())

    def __iter__(self) -> Iterator[MarkerEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key) -> bool:
        kind, entity_id = key
        return (TargetKind(kind), entity_id) in self._entries
