"""
Bookstore API — Author SQLAlchemy Model
========================================

What:  ORM model representing the `authors` table.
Who:   Used by AuthorRepository for CRUD operations and by Alembic.

Table Design:
    - Integer primary key assigned by the store on insert
    - firstname / lastname: required, short strings
    - books: one-to-many; Author owns the relation, Book only holds the
      foreign key back to it
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore_api.database import Base

if TYPE_CHECKING:
    from bookstore_api.models.book import Book


class Author(Base):
    """
    An author of zero or more books.

    Lifecycle:
        1. Created by POST /api/Authors (id assigned by the store)
        2. Replaced in full by PUT /api/Authors/{id}
        3. Hard-deleted by DELETE /api/Authors/{id}; the author's books
           survive with author_id set to NULL
    """

    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    firstname: Mapped[str] = mapped_column(String(50), nullable=False)

    lastname: Mapped[str] = mapped_column(String(50), nullable=False)

    # ── Relationships ─────────────────────────────────────────────────────
    # lazy="selectin": async sessions cannot lazy-load on attribute access,
    # so the collection is fetched together with the author
    books: Mapped[List["Book"]] = relationship(
        back_populates="author",
        lazy="selectin",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Author(id={self.id}, name='{self.firstname} {self.lastname}')>"
