"""
Bookstore API — Author Schemas
===============================

What:  Request/response models for /api/Authors.
How:   FastAPI validates request bodies against AuthorCreate / AuthorUpdate;
       invalid bodies are rendered as 400 by the handler in main.py.
"""

from typing import List

from pydantic import BaseModel, Field

from bookstore_api.schemas.book import BookRead


class AuthorCreate(BaseModel):
    """Body of POST /api/Authors."""

    firstname: str = Field(min_length=1, max_length=50, description="Author's first name")
    lastname: str = Field(min_length=1, max_length=50, description="Author's last name")


class AuthorUpdate(BaseModel):
    """Body of PUT /api/Authors/{id}. Replaces every field of the author."""

    id: int = Field(description="Must equal the id in the request path")
    firstname: str = Field(min_length=1, max_length=50)
    lastname: str = Field(min_length=1, max_length=50)


class AuthorRead(BaseModel):
    """
    What:  Full representation of an author, including the books they wrote.
    Who:   Returned by GET /api/Authors, GET /api/Authors/{id} and POST.
    """

    id: int = Field(description="Store-assigned identifier")
    firstname: str
    lastname: str
    books: List[BookRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}
