"""Book persistence."""

from bookstore_api.models.book import Book
from bookstore_api.repositories.base import SqlAlchemyRepository


class BookRepository(SqlAlchemyRepository[Book]):
    """Repository for the `books` table."""

    model = Book
