class BookingEngineError(RuntimeError):
    """Base for errors surfaced to API callers."""
    status_code = 500


class BookingValidationError(BookingEngineError):
    """Raised when a request is missing fields or carries malformed values."""
    status_code = 400


class BookingLinkNotFoundError(BookingEngineError):
    """Raised when a booking link is unknown or inactive."""
    status_code = 404


class HostNotFoundError(BookingEngineError):
    """Raised when a host account does not exist."""
    status_code = 404


class SlotConflictError(BookingEngineError):
    """Raised when the requested slot is no longer free at commit time."""
    status_code = 409


class SlugTakenError(BookingEngineError):
    """Raised when a booking link slug is already in use."""
    status_code = 409


class CalendarUpstreamError(RuntimeError):
    """Raised by calendar/mail adapters on transport or provider failures (timeouts, HTTP errors, bad payloads)."""
    pass
