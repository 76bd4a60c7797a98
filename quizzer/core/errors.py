"""
Error taxonomy shared by the service layer and the HTTP boundary.

Each error carries the HTTP status it maps to so the API layer can
translate it without a lookup table.
"""

from __future__ import annotations

from typing import Any


class QuizzerError(Exception):
    """Base class for all expected application errors."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.details = details


class ValidationError(QuizzerError):
    """Malformed or out-of-range input."""

    status_code = 400
    public_message = "Validation failed"


class AuthenticationError(QuizzerError):
    """Missing, invalid or expired bearer token."""

    status_code = 401
    public_message = "Unauthorized"


class ForbiddenError(QuizzerError):
    """Resource belongs to another user."""

    status_code = 403
    public_message = "Forbidden"


class NotFoundError(QuizzerError):
    """Quiz, question, submission or user absent."""

    status_code = 404
    public_message = "Resource not found"


class ConfigurationError(QuizzerError):
    """A required secret or setting is missing."""

    status_code = 500
    public_message = "Server misconfigured"


class UnavailableError(QuizzerError):
    """Downstream store unreachable."""

    status_code = 503
    public_message = "Service unavailable"
