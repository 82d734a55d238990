"""Author persistence."""

from bookstore_api.models.author import Author
from bookstore_api.repositories.base import SqlAlchemyRepository


class AuthorRepository(SqlAlchemyRepository[Author]):
    """
    Repository for the `authors` table.

    Author.books is a selectin relationship, so every author returned by
    find_all/find_by_id/create already carries its books.
    """

    model = Author
