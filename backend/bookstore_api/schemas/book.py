"""
Bookstore API — Book Schemas
=============================

What:  Request/response models for /api/Books.

Field rules:
    title, isbn   required
    summary       up to 500 characters
    year          0..9999 when given
    author_id     optional; must reference an existing author. The database
                  enforces this with a foreign key, not these schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field


class BookCreate(BaseModel):
    """Body of POST /api/Books."""

    title: str = Field(min_length=1, max_length=150)
    year: Optional[int] = Field(default=None, ge=0, le=9999)
    isbn: str = Field(min_length=1, max_length=20)
    summary: Optional[str] = Field(default=None, max_length=500)
    image: Optional[str] = Field(default=None, max_length=255, description="Cover image path")
    author_id: Optional[int] = Field(default=None, ge=1)


class BookUpdate(BaseModel):
    """Body of PUT /api/Books/{id}. Full replace: omitted optionals become null."""

    id: int = Field(description="Must equal the id in the request path")
    title: str = Field(min_length=1, max_length=150)
    year: Optional[int] = Field(default=None, ge=0, le=9999)
    isbn: str = Field(min_length=1, max_length=20)
    summary: Optional[str] = Field(default=None, max_length=500)
    image: Optional[str] = Field(default=None, max_length=255)
    author_id: Optional[int] = Field(default=None, ge=1)


class BookRead(BaseModel):
    """Full representation of a book."""

    id: int
    title: str
    year: Optional[int] = None
    isbn: str
    summary: Optional[str] = None
    image: Optional[str] = None
    author_id: Optional[int] = None

    model_config = {"from_attributes": True}
