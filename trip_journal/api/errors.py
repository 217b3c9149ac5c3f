# trip_journal/api/errors.py
"""Exception types shared by the service, route and highlight layers."""


class TripJournalError(Exception):
    """Base class for all application errors."""


class InvalidTripIdError(TripJournalError, ValueError):
    """The trip identifier is missing or not a positive integer."""


class TripNotFoundError(TripJournalError, LookupError):
    """No trip exists for the requested identifier."""


class DataServiceError(TripJournalError):
    """The database service could not be reached or returned an error."""


class InsufficientDataError(TripJournalError, ValueError):
    """A viewport was requested for an empty set of stops."""


class InvalidCoordinateError(TripJournalError, ValueError):
    """A coordinate is not a finite real number."""


class InvalidEventError(TripJournalError, ValueError):
    """A highlight event payload could not be understood."""
