# trip_journal/routes/websocket/connection.py
"""WebSocket connection and disconnection handlers."""

import logging
from flask import request
from flask_socketio import disconnect

from .base import BaseWebSocketHandler
from trip_journal.highlight.session_manager import get_session_manager
from trip_journal.routes.websocket.callback_helpers import SocketIOMapSurface, wire_state_broadcast

logger = logging.getLogger(__name__)


class ConnectionHandler(BaseWebSocketHandler):
    """Handles WebSocket connection lifecycle events."""

    def register_handlers(self):
        """Register connection-related event handlers."""

        @self.socketio.on('connect', namespace=self.namespace)
        def handle_connect(auth=None):
            """Create the highlight engine for this browser tab."""
            client_info = self.get_client_info()
            self.log_event('connect')

            try:
                surface = SocketIOMapSurface(self.socketio, request.sid, self.namespace)
                highlight_session = get_session_manager().create_session(
                    request.sid, client_info['ip'], surface
                )

                if not highlight_session:
                    logger.error("❌ Failed to create highlight session - server at capacity")
                    self.emit_to_client('error', {'message': 'Server at capacity'})
                    disconnect()
                    return

                wire_state_broadcast(highlight_session, surface)

                logger.info(f"🔗 Highlight session ready: {highlight_session.session_id}")
                self.emit_to_client('connected', {
                    'session_id': highlight_session.session_id,
                    'status': 'connected',
                })

            except Exception as e:
                logger.error(f"Connection error: {e}")
                self.handle_error(e, 'connect')
                disconnect()

        @self.socketio.on('disconnect', namespace=self.namespace)
        def handle_disconnect(*args):
            """Tear down the highlight engine and its pending timer."""
            try:
                get_session_manager().remove_session(request.sid, 'client_disconnect')
                logger.info(f"🔌 WebSocket disconnected, session {request.sid} removed")
            except Exception as e:
                logger.error(f"Disconnect error for {request.sid}: {e}")
