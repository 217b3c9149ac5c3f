# trip_journal/routes/trips.py
"""Trip page routes and blueprint configuration."""

import os
import logging
from flask import Blueprint, render_template, jsonify

from trip_journal.api.config import get_google_maps_config
from trip_journal.api.errors import DataServiceError, InvalidTripIdError, TripNotFoundError
from trip_journal.api.services.map_service import MapService
from trip_journal.api.services.trip_service import TripService

logger = logging.getLogger(__name__)


def create_trips_blueprint(base_dir):
    """Create and configure the trips blueprint.

    Args:
        base_dir: Absolute path to the package directory holding templates

    Returns:
        Configured Flask Blueprint
    """
    trips_bp = Blueprint(
        "trips",
        __name__,
        template_folder=os.path.join(base_dir, 'templates'),
        url_prefix="/trips"
    )

    @trips_bp.route("/api/trip/", defaults={"trip_id": None})
    @trips_bp.route("/api/trip/<trip_id>")
    def api_trip(trip_id):
        """Return trip, ordered stops with POIs, owner profile and map model."""
        try:
            page = TripService.load_trip_page(trip_id)
        except InvalidTripIdError as e:
            return jsonify({"message": str(e)}), 400
        except TripNotFoundError:
            return jsonify({"message": "Trip not found"}), 404
        except DataServiceError as e:
            logger.error(f"Error fetching trip {trip_id}: {e}")
            return jsonify({"message": "Error fetching trip", "error": str(e)}), 502

        return jsonify({"message": "Trip fetched successfully", **page})

    @trips_bp.route("/<trip_id>")
    def trip_page(trip_id):
        """Server-rendered trip page; shows a placeholder when unavailable."""
        try:
            page = TripService.load_trip_page(trip_id)
        except InvalidTripIdError as e:
            return render_template("trip.html", page=None, error=str(e)), 400
        except TripNotFoundError:
            return render_template("trip.html", page=None, error="Trip not found"), 404
        except DataServiceError:
            return render_template("trip.html", page=None, error="Trip is unavailable right now"), 502

        return render_template(
            "trip.html",
            page=page,
            error=None,
            google_maps_api_key=get_google_maps_config()["api_key"],
            map_options=MapService.map_options(),
        )

    @trips_bp.route("/api/config")
    def api_config():
        """Return Google Maps configuration for frontend."""
        config = get_google_maps_config()

        if config.get("api_key"):
            return jsonify({
                "auth_type": "api_key",
                "google_maps_api_key": config["api_key"],
                "google_maps_client_id": config.get("client_id", ""),
                "client_secret_configured": bool(config.get("client_secret"))
            })
        else:
            return jsonify({
                "error": "No Google Maps API key configured"
            }), 500

    @trips_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "trips"})

    return trips_bp


__all__ = ['create_trips_blueprint']
