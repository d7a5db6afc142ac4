"""
Book service built on the in-memory repository. ISBNs are unique.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from memstore.domain.exceptions import ValidationError
from memstore.domain.models import Book, BookCreate, BookUpdate, Page
from memstore.repository.memory import InMemoryRepository
from memstore.utils.logging import get_logger

log = get_logger(__name__)

TITLE_MAX_LENGTH = 100
AUTHOR_MAX_LENGTH = 50
ISBN_MIN_LENGTH = 10


def is_valid_isbn(isbn: str) -> bool:
    # Loose format check: long enough and hyphenated.
    return len(isbn) >= ISBN_MIN_LENGTH and "-" in isbn


def validate_book_fields(fields: Mapping[str, Any]) -> Dict[str, str]:
    """
    Check every supplied field and collect one message per invalid field.
    Fields missing from `fields` are not checked.
    """
    errors: Dict[str, str] = {}

    if "title" in fields:
        title = fields["title"]
        if not title:
            errors["title"] = "title is required"
        elif len(title) > TITLE_MAX_LENGTH:
            errors["title"] = f"title must be at most {TITLE_MAX_LENGTH} characters"

    if "author" in fields:
        author = fields["author"]
        if not author:
            errors["author"] = "author is required"
        elif len(author) > AUTHOR_MAX_LENGTH:
            errors["author"] = f"author must be at most {AUTHOR_MAX_LENGTH} characters"

    if "isbn" in fields:
        isbn = fields["isbn"]
        if not isbn:
            errors["isbn"] = "isbn is required"
        elif not is_valid_isbn(isbn):
            errors["isbn"] = "isbn is not in a valid format"

    if "price" in fields:
        price = fields["price"]
        if price is None or price <= 0:
            errors["price"] = "price must be greater than 0"

    return errors


class BookService:
    def __init__(self, repository: Optional[InMemoryRepository[Book]] = None) -> None:
        self.repository = repository or InMemoryRepository(Book, unique_fields=("isbn",))

    def create_book(self, request: BookCreate) -> Book:
        fields = dict(request)
        errors = validate_book_fields(fields)
        if errors:
            raise ValidationError(errors)
        book = self.repository.create(fields)
        log.info("Book created", extra={"book_id": book.id, "isbn": book.isbn})
        return book

    def get_book(self, book_id: int) -> Book:
        return self.repository.get_by_id(book_id)

    def get_book_by_isbn(self, isbn: str) -> Book:
        return self.repository.get_by_unique_field("isbn", isbn)

    def list_books(self, page: Optional[int] = 1, page_size: Optional[int] = None) -> Page[Book]:
        return self.repository.list(page=page, page_size=page_size)

    def update_book(self, book_id: int, request: BookUpdate) -> Book:
        changes = {name: getattr(request, name) for name in request.model_fields_set}
        errors = validate_book_fields(changes)
        if errors:
            raise ValidationError(errors)
        return self.repository.update(book_id, changes)

    def delete_book(self, book_id: int) -> None:
        self.repository.delete(book_id)
        log.info("Book deleted", extra={"book_id": book_id})


__all__ = ["BookService", "is_valid_isbn", "validate_book_fields"]
