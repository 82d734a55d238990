"""
Bookstore API — Book SQLAlchemy Model
======================================

What:  ORM model representing the `books` table.
Who:   Used by BookRepository for CRUD operations and by Alembic.

Table Design:
    - Integer primary key assigned by the store on insert
    - author_id: nullable foreign key to authors.id. ON DELETE SET NULL keeps
      the book when its author is removed; the store, not the handler,
      rejects ids that reference no author
    - image: relative path to a cover image, stored as given
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore_api.database import Base

if TYPE_CHECKING:
    from bookstore_api.models.author import Author


class Book(Base):
    """A book, optionally linked to the author who wrote it."""

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(150), nullable=False)

    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    isbn: Mapped[str] = mapped_column(String(20), nullable=False)

    summary: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    image: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    author_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("authors.id", ondelete="SET NULL"),
        nullable=True,
    )

    author: Mapped[Optional["Author"]] = relationship(back_populates="books")

    # Author.books is loaded by author_id on every author read
    __table_args__ = (
        Index("idx_books_author_id", "author_id"),
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', author_id={self.author_id})>"
