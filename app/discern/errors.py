"""
Discern error hierarchy.

Everything the boundary layers (API, UI) are expected to surface inherits
from DiscernError. Classifier failures are not here: they are recovered
inside the classifier and never reach a caller.
"""


class DiscernError(Exception):
    """Base exception for all Discern errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "DISCERN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to the JSON error body used by the HTTP API."""
        return {"error": self.message, "code": self.code}


class SessionNotFoundError(DiscernError):
    """Raised when a session ID is unknown (or has expired)."""

    status_code = 404

    def __init__(self, session_id: str):
        super().__init__("Session not found", "SESSION_NOT_FOUND")
        self.session_id = session_id


class MomentNotFoundError(DiscernError):
    """Raised when a moment ID is not in the catalog."""

    status_code = 404

    def __init__(self, moment_id):
        super().__init__("Moment not found", "MOMENT_NOT_FOUND")
        self.moment_id = moment_id


class InvalidInputError(DiscernError, ValueError):
    """Raised by the input guard before any session mutation."""

    status_code = 422

    def __init__(self, message: str):
        super().__init__(message, "INVALID_INPUT")
