"""
Repository interfaces for memstore.

Concrete repositories implement the `Repository` protocol (or subclass the
`AbstractRepository` ABC) so services and hosting layers depend on the
contract rather than on a particular store.
"""

from __future__ import annotations

import abc
from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel

from memstore.domain.models import Page, RecordT

#: Create and patch payloads: a pydantic model (only set fields count for
#: patches) or a plain mapping of field name to value.
Payload = Union[BaseModel, Mapping[str, Any]]


@runtime_checkable
class Repository(Protocol[RecordT]):
    """
    CRUD contract over records of a single type.

    Every operation either returns plain data or raises one of NotFoundError,
    ConflictError or InvalidFieldError, leaving the store untouched on failure.
    """

    def create(self, fields: Payload) -> RecordT:
        """Store a new record, assigning id and timestamps."""
        ...

    def get_by_id(self, record_id: int) -> RecordT:
        """Return the live record with the given id."""
        ...

    def get_by_unique_field(self, field_name: str, value: Any) -> RecordT:
        """Return the live record holding `value` on a declared-unique field."""
        ...

    def list(self, page: Optional[int] = 1, page_size: Optional[int] = None) -> Page[RecordT]:
        """Return one page, newest first, plus the total number of live records."""
        ...

    def update(self, record_id: int, patch: Payload) -> RecordT:
        """Apply a sparse patch atomically and refresh `updated_at`."""
        ...

    def delete(self, record_id: int) -> None:
        """Remove a record permanently; its id is never reassigned."""
        ...


class AbstractRepository(abc.ABC):
    """
    Optional ABC helper for class-based implementations.
    """

    @abc.abstractmethod
    def create(self, fields: Payload) -> Any:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def get_by_id(self, record_id: int) -> Any:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def get_by_unique_field(self, field_name: str, value: Any) -> Any:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def list(
        self, page: Optional[int] = 1, page_size: Optional[int] = None
    ) -> Page[Any]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def update(self, record_id: int, patch: Payload) -> Any:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, record_id: int) -> None:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = ["Payload", "Repository", "AbstractRepository"]
