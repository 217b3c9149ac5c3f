"""
Trip Journal – main application entry point

* Flask app + Socket.IO serving the trip page, its JSON API and the
  map/itinerary highlighting namespace.
* Socket.IO runs in threading mode; the hover dismissal timers are plain
  threads, so no eventlet/gevent is required.
* The highlighting namespace is `/trips/ws`.
"""

import os
import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from dotenv import load_dotenv

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from trip_journal.api.config import get_port, get_websocket_config, validate_highlight_config  # noqa: E402

validate_highlight_config()

# --------------------------------------------------------------------------- #
# Flask initialisation
# --------------------------------------------------------------------------- #
app = Flask(__name__)

flask_secret_key = os.getenv("FLASK_SECRET_KEY") or os.urandom(32).hex()
if "FLASK_SECRET_KEY" not in os.environ:
    logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
app.secret_key = flask_secret_key

app.config.update(
    SESSION_COOKIE_SECURE=False,
    SESSION_COOKIE_HTTPONLY=True,
    SESSION_COOKIE_SAMESITE="Lax",
)

# CORS for local dev / cross‑origin front‑end requests
CORS(app, origins="*", supports_credentials=True)

# --------------------------------------------------------------------------- #
# Socket.IO
# --------------------------------------------------------------------------- #
ws_config = get_websocket_config()
socketio = SocketIO(
    app,
    cors_allowed_origins=ws_config["cors_allowed_origins"],
    async_mode="threading",
    ping_interval=ws_config["ping_interval"],
    ping_timeout=ws_config["ping_timeout"],
    logger=False,
    engineio_logger=False,
)
logger.info("Socket.IO initialised (async_mode=threading)")

# --------------------------------------------------------------------------- #
# Blueprints & WebSocket handlers
# --------------------------------------------------------------------------- #
from trip_journal.routes.trips import create_trips_blueprint  # noqa: E402
from trip_journal.routes.websocket import register_websocket_handlers, NAMESPACE  # noqa: E402
from trip_journal.highlight.session_manager import get_session_manager  # noqa: E402

package_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "trip_journal")
app.register_blueprint(create_trips_blueprint(package_dir))
register_websocket_handlers(socketio)


@app.route("/debug")
def debug():
    """Simple JSON health endpoint."""
    return {
        "status": "ok",
        "socketio_initialized": True,
        "highlight_sessions": get_session_manager().get_stats(),
        "endpoints": {
            "trip_api": "/trips/api/trip/<trip_id>",
            "trip_page": "/trips/<trip_id>",
            "websocket_namespace": NAMESPACE,
        },
    }


# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    port = get_port()
    logger.info("Starting trip journal on http://localhost:%d", port)
    socketio.run(app, host="0.0.0.0", port=port, debug=False, allow_unsafe_werkzeug=True)

__all__ = ["app", "socketio"]
