"""
Bookstore API — Mapping Profile
================================

The mapping rules of the application. Called once from create_app().
Nested rules must be registered before the rules that use them.
"""

from bookstore_api.models import Author, Book
from bookstore_api.schemas import (
    AuthorCreate,
    AuthorRead,
    AuthorUpdate,
    BookCreate,
    BookRead,
    BookUpdate,
)
from bookstore_api.services.mapper import MappingRegistry

BOOK_FIELDS = ("title", "year", "isbn", "summary", "image", "author_id")
AUTHOR_FIELDS = ("firstname", "lastname")


def build_mapping_registry() -> MappingRegistry:
    registry = MappingRegistry()

    # ── Books ─────────────────────────────────────────────────────────────
    registry.register(BookCreate, Book, fields=BOOK_FIELDS)
    registry.register(BookUpdate, Book, fields=("id",) + BOOK_FIELDS)
    registry.register(Book, BookRead, fields=("id",) + BOOK_FIELDS)

    # ── Authors ───────────────────────────────────────────────────────────
    registry.register(AuthorCreate, Author, fields=AUTHOR_FIELDS)
    registry.register(AuthorUpdate, Author, fields=("id",) + AUTHOR_FIELDS)
    registry.register(
        Author,
        AuthorRead,
        fields=("id",) + AUTHOR_FIELDS + ("books",),
        nested={"books": BookRead},
    )

    return registry
