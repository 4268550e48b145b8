from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""


class PersistenceError(DomainError):
    """Raised when the database cannot be reached or rejects a statement."""


class ForgottenStopError(ValidationError):
    """Raised when a punch is refused because a previous day's session is still open."""

    def __init__(self, message: str, anomaly):
        super().__init__(message)
        self.anomaly = anomaly
