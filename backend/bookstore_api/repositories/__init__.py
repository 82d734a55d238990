"""
Bookstore API — Repositories
=============================

Adapters between the request handler and the database. One class per
entity, all built on SqlAlchemyRepository.
"""

from bookstore_api.repositories.author import AuthorRepository
from bookstore_api.repositories.base import (
    EntityRepository,
    FailureKind,
    SqlAlchemyRepository,
    StoreResult,
)
from bookstore_api.repositories.book import BookRepository

__all__ = [
    "AuthorRepository",
    "BookRepository",
    "EntityRepository",
    "FailureKind",
    "SqlAlchemyRepository",
    "StoreResult",
]
