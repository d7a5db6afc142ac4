"""
Pytest configuration for memstore.

Provides fixtures for:
- A controllable clock so timestamp ordering is deterministic
- Fresh repositories and services per test
- Settings isolation (cache reset) and logging isolation for CLI runs
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Generator, Optional

import pytest

from memstore.config import get_settings
from memstore.domain.models import Book, Record, User
from memstore.repository.memory import InMemoryRepository
from memstore.services.books import BookService
from memstore.services.users import UserService

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """
    Clock that advances by `step` on every reading. A zero step freezes time.
    """

    def __init__(self, start: datetime = EPOCH, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        reading = self.current
        self.current += self.step
        return reading

    def rewind(self, delta: timedelta) -> None:
        self.current -= delta


class Widget(Record):
    """Generic record type used to test the repository apart from any service."""

    sku: str
    name: str
    quantity: int = 0
    note: Optional[str] = None


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """
    Settings are cached process-wide; reset around every test so env
    overrides set with monkeypatch take effect and do not leak.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Put the root logger back the way it was after a test reconfigures it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def frozen_clock() -> FakeClock:
    return FakeClock(step=timedelta(0))


@pytest.fixture
def make_widget_repo(clock: FakeClock):
    """Factory for widget repositories; keyword arguments override the defaults."""

    def _make(**overrides) -> InMemoryRepository[Widget]:
        options = {"unique_fields": ("sku",), "clock": clock}
        options.update(overrides)
        return InMemoryRepository(Widget, **options)

    return _make


@pytest.fixture
def widget_repo(make_widget_repo) -> InMemoryRepository[Widget]:
    return make_widget_repo()


@pytest.fixture
def user_repo(clock: FakeClock) -> InMemoryRepository[User]:
    return InMemoryRepository(User, unique_fields=("username", "email"), clock=clock)


@pytest.fixture
def book_repo(clock: FakeClock) -> InMemoryRepository[Book]:
    return InMemoryRepository(Book, unique_fields=("isbn",), clock=clock)


@pytest.fixture
def user_service(user_repo: InMemoryRepository[User]) -> UserService:
    return UserService(user_repo)


@pytest.fixture
def book_service(book_repo: InMemoryRepository[Book]) -> BookService:
    return BookService(book_repo)
