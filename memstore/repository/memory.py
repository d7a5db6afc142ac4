"""
In-memory repository with uniqueness constraints and pagination.

Records live in an id-keyed dict; every declared unique field has its own
`value -> id` index. A single reader/writer lock guards both, so the
uniqueness check and the write of a create or update happen as one unit and
concurrent callers can never produce two live records sharing a unique value.

Usage:
    from memstore.domain.models import User
    from memstore.repository.memory import InMemoryRepository

    users = InMemoryRepository(User, unique_fields=("username", "email"))
    alice = users.create({"username": "alice", "email": "a@x.com"})
    users.update(alice.id, {"email": "c@x.com"})
    page = users.list(page=1, page_size=20)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from memstore.config import get_settings
from memstore.domain.exceptions import ConflictError, InvalidFieldError, NotFoundError
from memstore.domain.models import SYSTEM_FIELDS, Page, RecordT
from memstore.repository.abstract import AbstractRepository, Payload
from memstore.repository.pagination import normalize_page, paginate
from memstore.utils.locks import ReadWriteLock
from memstore.utils.logging import get_logger

log = get_logger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _invalid_from_pydantic(exc: PydanticValidationError) -> InvalidFieldError:
    """Collapse a pydantic error into an InvalidFieldError naming the first bad field."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return InvalidFieldError(field, first.get("msg"))


class InMemoryRepository(AbstractRepository, Generic[RecordT]):
    """
    Thread-safe in-memory CRUD store for one record type.

    Parameters
    ----------
    model : type[Record]
        Record subclass stored by this repository.
    unique_fields : iterable[str]
        Fields whose values must be distinct across live records. `None`
        values are not indexed, so any number of records may leave an
        optional unique field unset.
    clock : callable | None
        Source of timestamps; defaults to timezone-aware UTC now. Readings
        that go backwards are clamped to the last issued timestamp.
    default_page_size, max_page_size : int | None
        Listing limits; default to the values in settings.
    """

    def __init__(
        self,
        model: Type[RecordT],
        unique_fields: Iterable[str] = (),
        clock: Optional[Clock] = None,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
    ) -> None:
        self.model = model
        self.name = model.__name__
        self.unique_fields = tuple(unique_fields)
        for field in self.unique_fields:
            if field in SYSTEM_FIELDS or field not in model.model_fields:
                raise InvalidFieldError(field, f"cannot be declared unique on {self.name}")

        settings = get_settings()
        self.default_page_size = default_page_size or settings.page_size_default
        self.max_page_size = max_page_size or settings.page_size_max

        self._clock = clock or utcnow
        self._last_ts: Optional[datetime] = None
        self._lock = ReadWriteLock()
        self._records: Dict[int, RecordT] = {}
        self._unique_index: Dict[str, Dict[Any, int]] = {f: {} for f in self.unique_fields}
        self._next_id = 1

    # ------------------------------------------------------------------ helpers

    def _now(self) -> datetime:
        # Called with the write lock held.
        ts = self._clock()
        if self._last_ts is not None and ts < self._last_ts:
            ts = self._last_ts
        self._last_ts = ts
        return ts

    def _payload_dict(self, payload: Payload, partial: bool) -> Dict[str, Any]:
        if isinstance(payload, BaseModel):
            if partial:
                return {name: getattr(payload, name) for name in payload.model_fields_set}
            return dict(payload)
        return dict(payload)

    def _check_fields(self, data: Dict[str, Any]) -> None:
        for key in data:
            if key in SYSTEM_FIELDS:
                raise InvalidFieldError(key, "assigned by the repository")
            if key not in self.model.model_fields:
                raise InvalidFieldError(key, f"unknown field on {self.name}")

    def _owner_of(self, field: str, value: Any) -> Optional[int]:
        if value is None:
            return None
        try:
            return self._unique_index[field].get(value)
        except TypeError as exc:
            raise InvalidFieldError(field, "unique values must be hashable") from exc

    def _build(self, data: Dict[str, Any]) -> RecordT:
        try:
            return self.model.model_validate(data)
        except PydanticValidationError as exc:
            raise _invalid_from_pydantic(exc) from exc

    @staticmethod
    def _copy(record: RecordT) -> RecordT:
        return record.model_copy(deep=True)

    # --------------------------------------------------------------- operations

    def create(self, fields: Payload) -> RecordT:
        """
        Store a new record and return a copy of it.

        Raises
        ------
        ConflictError
            A declared-unique field already holds the same value.
        InvalidFieldError
            The payload names a system or unknown field, or fails validation.
        """
        data = self._payload_dict(fields, partial=False)
        self._check_fields(data)

        with self._lock.write():
            now = self._now()
            record = self._build(
                {**data, "id": self._next_id, "created_at": now, "updated_at": now}
            )
            for field in self.unique_fields:
                value = getattr(record, field)
                if self._owner_of(field, value) is not None:
                    log.info(
                        f"{self.name} create rejected: duplicate {field}",
                        extra={"resource": self.name, "field": field},
                    )
                    raise ConflictError(field, value)

            self._next_id += 1
            self._records[record.id] = record
            for field in self.unique_fields:
                value = getattr(record, field)
                if value is not None:
                    self._unique_index[field][value] = record.id

        log.debug(f"{self.name} created", extra={"resource": self.name, "record_id": record.id})
        return self._copy(record)

    def get_by_id(self, record_id: int) -> RecordT:
        with self._lock.read():
            record = self._records.get(record_id)
            if record is None:
                raise NotFoundError(self.name, "id", record_id)
            return self._copy(record)

    def get_by_unique_field(self, field_name: str, value: Any) -> RecordT:
        """
        Exact, case-sensitive lookup on a declared-unique field.
        """
        if field_name not in self._unique_index:
            raise InvalidFieldError(field_name, f"not declared unique on {self.name}")
        with self._lock.read():
            record_id = self._owner_of(field_name, value)
            if record_id is None:
                raise NotFoundError(self.name, field_name, value)
            return self._copy(self._records[record_id])

    def list(self, page: Optional[int] = 1, page_size: Optional[int] = None) -> Page[RecordT]:
        """
        Return one page ordered by `created_at` descending, ties by `id`
        descending. `total` always counts every live record.
        """
        page, page_size = normalize_page(
            page, page_size, self.default_page_size, self.max_page_size
        )
        with self._lock.read():
            ordered: List[RecordT] = sorted(
                self._records.values(),
                key=lambda r: (r.created_at, r.id),
                reverse=True,
            )
        result = paginate(ordered, page, page_size, model=self.model)
        result.items = [self._copy(r) for r in result.items]
        return result

    def update(self, record_id: int, patch: Payload) -> RecordT:
        """
        Apply the fields present in `patch`, all or nothing.

        Raises
        ------
        NotFoundError
            No live record has `record_id`.
        ConflictError
            A changed unique field collides with another live record.
        InvalidFieldError
            The patch names a system or unknown field, or fails validation.
        """
        changes = self._payload_dict(patch, partial=True)
        self._check_fields(changes)

        with self._lock.write():
            current = self._records.get(record_id)
            if current is None:
                raise NotFoundError(self.name, "id", record_id)

            updated = self._build({**dict(current), **changes, "updated_at": self._now()})
            moved: Dict[str, Any] = {}
            for field in self.unique_fields:
                old, new = getattr(current, field), getattr(updated, field)
                if new == old:
                    continue
                owner = self._owner_of(field, new)
                if owner is not None and owner != record_id:
                    log.info(
                        f"{self.name} update rejected: duplicate {field}",
                        extra={"resource": self.name, "field": field, "record_id": record_id},
                    )
                    raise ConflictError(field, new)
                moved[field] = old

            for field, old in moved.items():
                index = self._unique_index[field]
                if old is not None:
                    index.pop(old, None)
                new = getattr(updated, field)
                if new is not None:
                    index[new] = record_id
            self._records[record_id] = updated

        log.debug(
            f"{self.name} updated",
            extra={"resource": self.name, "record_id": record_id, "fields": sorted(changes)},
        )
        return self._copy(updated)

    def delete(self, record_id: int) -> None:
        with self._lock.write():
            record = self._records.pop(record_id, None)
            if record is None:
                raise NotFoundError(self.name, "id", record_id)
            for field in self.unique_fields:
                value = getattr(record, field)
                if value is not None:
                    self._unique_index[field].pop(value, None)

        log.debug(f"{self.name} deleted", extra={"resource": self.name, "record_id": record_id})

    # ------------------------------------------------------------ read helpers

    def exists(self, record_id: int) -> bool:
        with self._lock.read():
            return record_id in self._records

    def count(self) -> int:
        with self._lock.read():
            return len(self._records)

    def __len__(self) -> int:
        return self.count()


__all__ = ["Clock", "InMemoryRepository", "utcnow"]
