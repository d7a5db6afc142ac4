"""
Error taxonomy for memstore repositories and services.

These exceptions are transport-agnostic. Hosting layers translate them with
`http_status_for` and serialize them with `RepositoryError.to_dict`.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class RepositoryError(Exception):
    """Base exception for all repository and service errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.status_code,
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(RepositoryError):
    """Raised when an id or unique-field lookup does not resolve to a live record."""

    status_code = 404

    def __init__(self, resource: str, key: str, value: Any):
        self.resource = resource
        self.key = key
        self.value = value
        super().__init__(
            message=f"{resource} not found for {key}={value!r}",
            details={"resource": resource, "key": key, "value": value},
        )


class ConflictError(RepositoryError):
    """Raised when a create or update would duplicate a unique field value."""

    status_code = 409

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(
            message=f"{field} already exists: {value!r}",
            details={"field": field, "value": value},
        )


class InvalidFieldError(RepositoryError):
    """Raised when a caller references a field that is unknown, read-only or not unique."""

    status_code = 400

    def __init__(self, field: str, reason: Optional[str] = None):
        self.field = field
        self.reason = reason
        message = f"Invalid field: {field}"
        if reason:
            message += f" ({reason})"
        super().__init__(message=message, details={"field": field, "reason": reason})


class ValidationError(InvalidFieldError):
    """Raised by services when one or more payload fields fail domain validation."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(field=fields, reason="validation failed")
        self.message = f"Validation failed for: {fields}"
        self.args = (self.message,)
        self.details = {"errors": self.errors}


class AuthenticationError(RepositoryError):
    """Raised when credentials do not match a known user."""

    status_code = 401

    def __init__(self, message: str = "invalid username or password"):
        super().__init__(message=message)


def http_status_for(exc: BaseException) -> int:
    """
    Map an exception onto the HTTP status a hosting layer should answer with.

    Anything that is not a RepositoryError is an unexpected failure (500).
    """
    if isinstance(exc, RepositoryError):
        return exc.status_code
    return 500


__all__ = [
    "RepositoryError",
    "NotFoundError",
    "ConflictError",
    "InvalidFieldError",
    "ValidationError",
    "AuthenticationError",
    "http_status_for",
]
