from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidReferenceError(DomainError):
    """Raised when a student or its group cannot be resolved."""


class AlreadyActiveError(DomainError):
    """Raised when a student already has an open session."""


class NoActiveSessionError(DomainError):
    """Raised when clocking out a student who is not clocked in."""


class AuthenticationError(DomainError):
    """Raised when the admin password does not match."""


class CloudError(DomainError):
    """Base class for remote bin failures.

    `status` carries the provider HTTP status when there was a response.
    """

    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class CloudConnectionFailed(CloudError):
    """Fetching the remote bin failed (bad credentials, not found, unreachable)."""


class CloudSyncFailed(CloudError):
    """Pushing or polling failed after a successful connect."""
