"""
Domain error taxonomy.

Every expected failure carries an HTTP status and a message safe to show to
the caller. StorageError never carries engine text; the original exception is
chained for the logs only.
"""

from typing import Any, Optional


class TicketTangoError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, **self.details}


class ValidationError(TicketTangoError):
    """Bad input. Raised before any storage access."""

    status_code = 400
    message = "Invalid request"


class AuthenticationError(TicketTangoError):
    status_code = 401
    message = "Invalid credentials"


class InvalidTokenError(TicketTangoError):
    """A bearer token was sent but is malformed, forged or expired."""

    status_code = 403
    message = "Invalid or expired token"


class NotFoundError(TicketTangoError):
    status_code = 404
    message = "Not found"


class ConflictError(TicketTangoError):
    status_code = 409
    message = "Conflict"


class InsufficientTicketsError(ConflictError):
    status_code = 400
    message = "Not enough tickets available"

    def __init__(self, available: int):
        super().__init__(available=available)
        self.available = available


class PastEventError(ConflictError):
    status_code = 400
    message = "Cannot book tickets for past events"


class StorageError(TicketTangoError):
    status_code = 500
    message = "Internal server error"
