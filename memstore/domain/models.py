"""
Domain models for memstore.

`Record` is the base every stored entity extends: the repository owns its
`id`, `created_at` and `updated_at`. Create payloads carry everything else;
update payloads are sparse, so only the fields a caller explicitly set
(`model_fields_set`) are applied.
"""
from __future__ import annotations

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, EmailStr, Field

#: Fields the repository assigns; callers can never supply or patch them.
SYSTEM_FIELDS = frozenset({"id", "created_at", "updated_at"})


class Record(BaseModel):
    """
    Base representation of a stored entity.
    """

    id: int = Field(..., ge=1, description="Repository-assigned identifier, never reused.")
    created_at: datetime = Field(..., description="Creation timestamp, immutable.")
    updated_at: datetime = Field(..., description="Refreshed on every successful update.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }


class User(Record):
    username: str
    email: str
    password_hash: str = Field("", exclude=True, repr=False)


class UserCreate(BaseModel):
    """Model for user registration."""

    username: str = Field(..., min_length=3, max_length=20)
    email: EmailStr
    password: str = Field(..., min_length=6, repr=False)


class UserUpdate(BaseModel):
    """Sparse patch: unset fields are left untouched."""

    username: Optional[str] = Field(None, min_length=3, max_length=20)
    email: Optional[EmailStr] = None


class LoginRequest(BaseModel):
    username: str
    password: str = Field(..., repr=False)


class LoginResponse(BaseModel):
    token: str
    user: User


class Book(Record):
    title: str
    author: str
    isbn: str
    price: float
    published_at: Optional[datetime] = None


class BookCreate(BaseModel):
    title: str
    author: str
    isbn: str
    price: float
    published_at: Optional[datetime] = None


class BookUpdate(BaseModel):
    """Sparse patch: unset fields are left untouched."""

    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    price: Optional[float] = None
    published_at: Optional[datetime] = None


RecordT = TypeVar("RecordT", bound=Record)


class Page(BaseModel, Generic[RecordT]):
    """
    One window of a listing plus the size of the whole collection.
    """

    items: List[RecordT] = Field(default_factory=list)
    total: int = Field(0, ge=0, description="Count of all live records.")
    page: int = Field(1, ge=1)
    page_size: int = Field(..., ge=1)
    total_pages: int = Field(0, ge=0)


__all__ = [
    "SYSTEM_FIELDS",
    "Record",
    "RecordT",
    "User",
    "UserCreate",
    "UserUpdate",
    "LoginRequest",
    "LoginResponse",
    "Book",
    "BookCreate",
    "BookUpdate",
    "Page",
]
