"""
Domain package for memstore.

Exports the record models, payload shapes and error taxonomy shared by the
repository, services and orchestrator. Keep this package focused on data
definitions and validation concerns.
"""

from memstore.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidFieldError,
    NotFoundError,
    RepositoryError,
    ValidationError,
    http_status_for,
)
from memstore.domain.models import (
    Book,
    BookCreate,
    BookUpdate,
    LoginRequest,
    LoginResponse,
    Page,
    Record,
    User,
    UserCreate,
    UserUpdate,
)

__all__ = [
    # Models
    "Record",
    "Page",
    "User",
    "UserCreate",
    "UserUpdate",
    "LoginRequest",
    "LoginResponse",
    "Book",
    "BookCreate",
    "BookUpdate",
    # Errors
    "RepositoryError",
    "NotFoundError",
    "ConflictError",
    "InvalidFieldError",
    "ValidationError",
    "AuthenticationError",
    "http_status_for",
]
