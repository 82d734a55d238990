"""
Bookstore API — ORM Models
===========================

Importing this package registers every model with `Base.metadata`, which
Alembic autogenerate and `database.create_schema()` rely on.
"""

from bookstore_api.models.author import Author
from bookstore_api.models.book import Book

__all__ = ["Author", "Book"]
