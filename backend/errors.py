# errors.py
"""Typed failures raised by the roster engine.

Each error carries the HTTP status the API answers with. The builtin bases
keep ``except ValueError`` / ``except LookupError`` call sites working.
"""


class HousekeepingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HousekeepingError, ValueError):
    """Malformed id, unparsable date, value outside its allowed set, or a hotel mismatch."""
    status_code = 400


class AuthenticationError(HousekeepingError):
    """No caller identity, or one that does not resolve to an active user."""
    status_code = 401


class AuthorizationError(HousekeepingError, PermissionError):
    """Wrong role, cross-tenant access or mutation of somebody else's task."""
    status_code = 403


class NotFoundError(HousekeepingError, LookupError):
    status_code = 404


class ConflictError(HousekeepingError, ValueError):
    """A routine task for the same hotel/room/date/shift already exists."""
    status_code = 409
