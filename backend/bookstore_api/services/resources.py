"""
Bookstore API — Entity Resource Definitions
============================================

What:  Everything that differs between the Authors and Books endpoints:
       route name, ORM model, DTO shapes, repository class and how an
       entity is described in log lines.
Who:   create_app() builds one CrudHandler and one router per resource.
"""

from dataclasses import dataclass
from typing import Any, Callable, Type

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore_api.models import Author, Book
from bookstore_api.repositories import AuthorRepository, BookRepository, EntityRepository
from bookstore_api.schemas import (
    AuthorCreate,
    AuthorRead,
    AuthorUpdate,
    BookCreate,
    BookRead,
    BookUpdate,
)


@dataclass(frozen=True)
class EntityResource:
    """
    Attributes:
        name:               plural route segment and log tag, e.g. "Authors"
        model:              ORM class
        create_schema:      POST body
        update_schema:      PUT body (carries `id`)
        read_schema:        response body
        repository_factory: builds a repository around a request's session
        describe:           short human label of an entity or DTO for logs
    """

    name: str
    model: Type[Any]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    read_schema: Type[BaseModel]
    repository_factory: Callable[[AsyncSession], EntityRepository]
    describe: Callable[[Any], str]

    @property
    def slug(self) -> str:
        return self.name.lower()


AUTHORS = EntityResource(
    name="Authors",
    model=Author,
    create_schema=AuthorCreate,
    update_schema=AuthorUpdate,
    read_schema=AuthorRead,
    repository_factory=AuthorRepository,
    describe=lambda author: f"{author.firstname} {author.lastname}",
)

BOOKS = EntityResource(
    name="Books",
    model=Book,
    create_schema=BookCreate,
    update_schema=BookUpdate,
    read_schema=BookRead,
    repository_factory=BookRepository,
    describe=lambda book: f"{book.title}-{book.summary}",
)
