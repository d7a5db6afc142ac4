"""
Services package for memstore.

Thin domain services that validate input and delegate storage to a
repository they are constructed with.
"""

from memstore.services.books import BookService
from memstore.services.users import UserService

__all__ = [
    "BookService",
    "UserService",
]
