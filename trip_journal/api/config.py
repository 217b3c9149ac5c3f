# trip_journal/api/config.py
"""Configuration management for the trip journal API."""
import os
from dotenv import load_dotenv

load_dotenv()


def get_supabase_config():
    """Get Supabase REST configuration."""
    return {
        "url": os.getenv("SUPABASE_URL", "").rstrip("/"),
        "anon_key": os.getenv("SUPABASE_ANON_KEY", ""),
        "timeout_seconds": float(os.getenv("SUPABASE_TIMEOUT_SECONDS", "10")),
        "max_retries": int(os.getenv("SUPABASE_MAX_RETRIES", "3")),
    }


def get_google_maps_config():
    """Get Google Maps configuration."""
    return {
        "api_key": os.getenv("GOOGLE_MAPS_API_KEY", ""),
        "client_id": os.getenv("maps_client_id", ""),
        "client_secret": os.getenv("maps_client_secret", "")
    }


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 5000))


def get_highlight_config():
    """Get map/itinerary highlighting configuration."""
    return {
        # Grace period before a POI left on the map is dismissed
        "dismiss_delay_ms": int(os.getenv("HIGHLIGHT_DISMISS_DELAY_MS", "1500")),

        # Marker pulse played when a marker becomes emphasized
        "pulse_duration_ms": int(os.getenv("HIGHLIGHT_PULSE_DURATION_MS", "300")),
        "pulse_peak_scale": float(os.getenv("HIGHLIGHT_PULSE_PEAK_SCALE", "1.3")),
        "pulse_frame_ms": int(os.getenv("HIGHLIGHT_PULSE_FRAME_MS", "16")),

        # Map defaults mirrored by the browser
        "default_zoom": int(os.getenv("MAP_DEFAULT_ZOOM", "8")),
        # Smallest box (degrees) a fitted viewport is assumed to show
        "min_span_degrees": float(os.getenv("MAP_MIN_SPAN_DEGREES", "0.5")),
        "emphasized_z_index": 1000,

        # Session configuration
        "session_timeout_seconds": int(os.getenv("HIGHLIGHT_SESSION_TIMEOUT_SECONDS", "1800")),
        "max_sessions": int(os.getenv("MAX_HIGHLIGHT_SESSIONS", "500")),
        "cleanup_interval_seconds": int(os.getenv("HIGHLIGHT_CLEANUP_INTERVAL_SECONDS", "30")),
    }


def get_websocket_config():
    """Get WebSocket configuration."""
    return {
        "ping_interval": int(os.getenv("WEBSOCKET_PING_INTERVAL", "25")),
        "ping_timeout": int(os.getenv("WEBSOCKET_PING_TIMEOUT", "60")),
        "cors_allowed_origins": os.getenv("WEBSOCKET_CORS_ORIGINS", "*").split(",")
    }


def validate_highlight_config():
    """Validate highlighting configuration is within sane ranges."""
    config = get_highlight_config()

    if not 0 <= config["dismiss_delay_ms"] <= 5000:
        raise ValueError("HIGHLIGHT_DISMISS_DELAY_MS must be between 0 and 5000")

    if config["pulse_duration_ms"] <= 0 or config["pulse_frame_ms"] <= 0:
        raise ValueError("Pulse duration and frame length must be positive")

    if config["pulse_peak_scale"] < 1:
        raise ValueError("HIGHLIGHT_PULSE_PEAK_SCALE must be >= 1")

    if config["max_sessions"] < 1:
        raise ValueError("MAX_HIGHLIGHT_SESSIONS must be at least 1")

    return True
