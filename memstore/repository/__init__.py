"""
Repository package for memstore.

Re-exports the repository contract, the in-memory implementation and the
pagination helpers so callers can import from `memstore.repository` directly.
"""

from memstore.repository.abstract import AbstractRepository, Payload, Repository
from memstore.repository.memory import InMemoryRepository, utcnow
from memstore.repository.pagination import normalize_page, paginate

__all__ = [
    # Abstracts
    "AbstractRepository",
    "Payload",
    "Repository",
    # Concrete
    "InMemoryRepository",
    "utcnow",
    # Pagination
    "normalize_page",
    "paginate",
]
