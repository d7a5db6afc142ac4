"""
User service built on the in-memory repository.

Usernames and emails are unique. Passwords are kept only as bcrypt hashes
and `login` is a toy credential check that hands back an opaque random token;
it is not an authentication system.
"""

from __future__ import annotations

import secrets
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

from passlib.context import CryptContext
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from memstore.domain.exceptions import AuthenticationError, NotFoundError, ValidationError
from memstore.domain.models import (
    LoginRequest,
    LoginResponse,
    Page,
    User,
    UserCreate,
    UserUpdate,
)
from memstore.repository.memory import InMemoryRepository
from memstore.utils.logging import get_logger

log = get_logger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ModelT = TypeVar("ModelT", bound=BaseModel)

#: Fields a user record cannot be left without.
REQUIRED_FIELDS = ("username", "email")


def _parse(model: Type[ModelT], payload: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """
    Validate a raw payload against `model`, reporting every failing field at
    once. Already-built models pass through unchanged.
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        errors: Dict[str, str] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
            errors.setdefault(field, error["msg"])
        raise ValidationError(errors) from exc


class UserService:
    """
    Create, read, update, delete and log in users.

    The service owns no state of its own; everything lives in the repository
    it is constructed with, so callers decide the store's lifetime.
    """

    def __init__(self, repository: Optional[InMemoryRepository[User]] = None) -> None:
        self.repository = repository or InMemoryRepository(
            User, unique_fields=("username", "email")
        )

    def create_user(self, request: Union[UserCreate, Mapping[str, Any]]) -> User:
        request = _parse(UserCreate, request)
        user = self.repository.create(
            {
                "username": request.username,
                "email": request.email,
                "password_hash": pwd_context.hash(request.password),
            }
        )
        log.info("User created", extra={"user_id": user.id})
        return user

    def get_user(self, user_id: int) -> User:
        return self.repository.get_by_id(user_id)

    def get_user_by_username(self, username: str) -> User:
        return self.repository.get_by_unique_field("username", username)

    def get_user_by_email(self, email: str) -> User:
        return self.repository.get_by_unique_field("email", email)

    def list_users(self, page: Optional[int] = 1, page_size: Optional[int] = None) -> Page[User]:
        return self.repository.list(page=page, page_size=page_size)

    def update_user(self, user_id: int, request: Union[UserUpdate, Mapping[str, Any]]) -> User:
        """
        Change only the fields the caller set on `request`.
        """
        request = _parse(UserUpdate, request)
        errors = {
            field: f"{field} is required"
            for field in REQUIRED_FIELDS
            if field in request.model_fields_set and getattr(request, field) is None
        }
        if errors:
            raise ValidationError(errors)
        return self.repository.update(user_id, request)

    def delete_user(self, user_id: int) -> None:
        self.repository.delete(user_id)
        log.info("User deleted", extra={"user_id": user_id})

    def login(self, request: LoginRequest) -> LoginResponse:
        """
        Check a username/password pair. Unknown users and wrong passwords fail
        with the same error.
        """
        try:
            user = self.repository.get_by_unique_field("username", request.username)
        except NotFoundError:
            raise AuthenticationError() from None
        if not user.password_hash or not pwd_context.verify(
            request.password, user.password_hash
        ):
            raise AuthenticationError()
        return LoginResponse(token=secrets.token_urlsafe(32), user=user)


__all__ = ["UserService", "pwd_context"]
