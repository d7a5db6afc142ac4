"""
memstore - generic in-memory CRUD repository with uniqueness constraints.

This package provides:

- A thread-safe repository keyed by monotonic, never-reused ids
- Uniqueness enforcement on declared fields, checked atomically with writes
- Sparse (partial) updates and newest-first pagination
- User and book services built on the repository
- A contention harness that exercises the repository under concurrent load
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from memstore.config import Settings, get_settings
from memstore.domain.exceptions import (
    ConflictError,
    InvalidFieldError,
    NotFoundError,
    RepositoryError,
    http_status_for,
)
from memstore.domain.models import Page, Record
from memstore.orchestrator import RunConfig, available_scenarios, run_scenarios
from memstore.repository import InMemoryRepository, Repository
from memstore.services import BookService, UserService
from memstore.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Repository
    "InMemoryRepository",
    "Repository",
    "Record",
    "Page",
    # Errors
    "RepositoryError",
    "NotFoundError",
    "ConflictError",
    "InvalidFieldError",
    "http_status_for",
    # Services
    "BookService",
    "UserService",
    # Contention harness
    "RunConfig",
    "available_scenarios",
    "run_scenarios",
    # Logging
    "configure_logging",
    "get_logger",
]
