# trip_journal/routes/__init__.py
"""HTTP and Socket.IO routes for the trip journal."""
