"""Map/itinerary cross-highlighting engine."""

from .coordinator import EventSource, HighlightCoordinator, HighlightMode, HighlightState
from .registry import MarkerRegistry
from .renderer import CrossHighlightRenderer
from .session_manager import HighlightSession, get_session_manager
from .surface import MapSurface

__all__ = [
    'EventSource',
    'HighlightCoordinator',
    'HighlightMode',
    'HighlightState',
    'MarkerRegistry',
    'CrossHighlightRenderer',
    'HighlightSession',
    'MapSurface',
    'get_session_manager',
]
