# trip_journal/routes/websocket/__init__.py
"""Socket.IO handlers for the ``/trips/ws`` highlight namespace."""

import logging

from .base import NAMESPACE
from .connection import ConnectionHandler
from .highlight import HighlightHandler

logger = logging.getLogger(__name__)

HANDLER_CLASSES = (ConnectionHandler, HighlightHandler)


def register_websocket_handlers(socketio, namespace=NAMESPACE):
    """Attach every handler class to ``socketio`` under ``namespace``.

    Args:
        socketio: Flask-SocketIO instance
        namespace: Socket.IO namespace, ``/trips/ws`` unless overridden
    """
    for handler_cls in HANDLER_CLASSES:
        try:
            handler_cls(socketio, namespace).register_handlers()
        except Exception:
            logger.exception(f"Failed to register {handler_cls.__name__} on {namespace}")
            raise
        logger.info(f"Registered {handler_cls.__name__} on {namespace}")


__all__ = ['register_websocket_handlers', 'NAMESPACE']
