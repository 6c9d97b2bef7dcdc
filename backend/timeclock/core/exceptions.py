"""Domain errors raised by the time clock services.

Routers never catch these; the handler registered in ``timeclock.main``
renders them as JSON with an HTTP status and a stable ``code`` so the kiosk
can tell a duplicate punch apart from a generic failure.
"""


class TimeClockError(Exception):
    status_code = 500
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TimeClockError, ValueError):
    """Malformed input: bad PIN, missing field, incomplete partial-day request."""
    status_code = 400
    code = "validation_error"


class DuplicatePunchError(TimeClockError):
    """Same punch type for the same employee inside the dedup window."""
    status_code = 429
    code = "duplicate_punch"

    def __init__(self, message: str = "Duplicate punch detected. Please wait before punching again."):
        super().__init__(message)


class NotFoundError(TimeClockError, LookupError):
    status_code = 404
    code = "not_found"


class ConflictError(TimeClockError):
    """Invalid state transition, or a rule such as 'denials need a note'."""
    status_code = 409
    code = "conflict"


class StorageError(TimeClockError):
    status_code = 500
    code = "storage_error"
