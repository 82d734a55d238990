"""
Bookstore API — Pydantic Transport Schemas
===========================================

Each entity has three shapes:
    Create  — request body of POST, no id
    Update  — request body of PUT, id required and must equal the path id
    Read    — response body, every field
"""

from bookstore_api.schemas.author import AuthorCreate, AuthorRead, AuthorUpdate
from bookstore_api.schemas.book import BookCreate, BookRead, BookUpdate
from bookstore_api.schemas.common import ErrorResponse, HealthResponse

__all__ = [
    "AuthorCreate",
    "AuthorRead",
    "AuthorUpdate",
    "BookCreate",
    "BookRead",
    "BookUpdate",
    "ErrorResponse",
    "HealthResponse",
]
