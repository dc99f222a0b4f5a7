"""Domain errors raised by the services and translated at the HTTP boundary."""

from __future__ import annotations


class UserNotFoundError(Exception):
    """Raised when a user id does not resolve in the user directory."""


class ScoreValidationError(Exception):
    """Raised when a submitted game score is structurally invalid."""


class EmailAlreadyRegisteredError(Exception):
    """Raised when registering an email that another user already owns."""
