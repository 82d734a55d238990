"""
Bookstore API — CrudHandler Unit Tests
=======================================

What:  The shared request pipeline, with the repository replaced by an
       AsyncMock so no database is involved.

What we test:
    ✅ Validation happens before the store is touched
    ✅ Missing entities raise NotFoundError, never StoreFailureError
    ✅ Failed StoreResults and raised exceptions become StoreFailureError
    ✅ Failure detail is logged, never carried in the client message
"""

import dataclasses
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from bookstore_api.exceptions import (
    GENERIC_ERROR_MESSAGE,
    NotFoundError,
    StoreError,
    StoreFailureError,
    ValidationError,
)
from bookstore_api.models import Author, Book
from bookstore_api.repositories import FailureKind, StoreResult
from bookstore_api.schemas import AuthorCreate, AuthorRead, AuthorUpdate, BookRead, BookUpdate
from bookstore_api.services.crud_handler import CrudHandler
from bookstore_api.services.mapping_profile import build_mapping_registry
from bookstore_api.services.resources import AUTHORS, BOOKS

HANDLER_LOGGER = "bookstore_api.services.crud_handler"


@pytest.fixture
def mock_repository():
    repo = MagicMock()
    repo.find_all = AsyncMock(return_value=[])
    repo.find_by_id = AsyncMock(return_value=None)
    repo.exists = AsyncMock(return_value=False)
    repo.create = AsyncMock(return_value=StoreResult.success())
    repo.update = AsyncMock(return_value=StoreResult.success())
    repo.delete = AsyncMock(return_value=StoreResult.success())
    return repo


@pytest.fixture
def repository_factory(mock_repository):
    return MagicMock(return_value=mock_repository)


@pytest.fixture
def author_handler(repository_factory):
    resource = dataclasses.replace(AUTHORS, repository_factory=repository_factory)
    return CrudHandler(resource, build_mapping_registry())


@pytest.fixture
def book_handler(repository_factory):
    resource = dataclasses.replace(BOOKS, repository_factory=repository_factory)
    return CrudHandler(resource, build_mapping_registry())


class TestList:

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty_list(self, author_handler, mock_db_session):
        assert await author_handler.list(mock_db_session) == []

    @pytest.mark.asyncio
    async def test_maps_every_entity(self, book_handler, mock_repository, mock_db_session):
        mock_repository.find_all.return_value = [
            Book(id=1, title="A", isbn="1"),
            Book(id=2, title="B", isbn="2"),
        ]

        result = await book_handler.list(mock_db_session)

        assert [b.id for b in result] == [1, 2]
        assert all(isinstance(b, BookRead) for b in result)

    @pytest.mark.asyncio
    async def test_store_error_becomes_store_failure(
        self, book_handler, mock_repository, mock_db_session, caplog
    ):
        mock_repository.find_all.side_effect = StoreError(
            kind=FailureKind.UNAVAILABLE.value,
            context={"error": "could not connect to server"},
        )

        with caplog.at_level(logging.ERROR, logger=HANDLER_LOGGER):
            with pytest.raises(StoreFailureError) as exc_info:
                await book_handler.list(mock_db_session)

        assert exc_info.value.kind == "unavailable"
        assert exc_info.value.message == GENERIC_ERROR_MESSAGE
        assert "Books-List" in caplog.text
        assert "could not connect to server" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_store_failure(
        self, author_handler, mock_repository, mock_db_session, caplog
    ):
        mock_repository.find_all.side_effect = RuntimeError("driver exploded")

        with caplog.at_level(logging.ERROR, logger=HANDLER_LOGGER):
            with pytest.raises(StoreFailureError) as exc_info:
                await author_handler.list(mock_db_session)

        assert exc_info.value.kind == "unknown"
        assert "driver exploded" not in exc_info.value.message
        assert "driver exploded" in caplog.text


class TestGet:

    @pytest.mark.asyncio
    async def test_found(self, author_handler, mock_repository, mock_db_session):
        mock_repository.find_by_id.return_value = Author(id=3, firstname="Jane", lastname="Doe")

        result = await author_handler.get(mock_db_session, 3)

        assert isinstance(result, AuthorRead)
        assert result.id == 3
        assert result.books == []
        mock_repository.find_by_id.assert_awaited_once_with(3)

    @pytest.mark.asyncio
    async def test_missing_raises_not_found(self, author_handler, mock_db_session, caplog):
        with caplog.at_level(logging.WARNING, logger=HANDLER_LOGGER):
            with pytest.raises(NotFoundError):
                await author_handler.get(mock_db_session, 999)

        assert "Authors-Get: Not found for id:999" in caplog.text


class TestCreate:

    @pytest.mark.asyncio
    async def test_absent_body_is_rejected_without_store(
        self, author_handler, repository_factory, mock_db_session
    ):
        with pytest.raises(ValidationError):
            await author_handler.create(mock_db_session, None)

        repository_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_success_returns_read_dto_with_id(
        self, author_handler, mock_repository, mock_db_session
    ):
        async def assign_id(entity):
            entity.id = 7
            return StoreResult.success()

        mock_repository.create.side_effect = assign_id

        result = await author_handler.create(
            mock_db_session, AuthorCreate(firstname="Jane", lastname="Doe")
        )

        assert isinstance(result, AuthorRead)
        assert result.id == 7
        assert (result.firstname, result.lastname) == ("Jane", "Doe")
        created = mock_repository.create.await_args.args[0]
        assert isinstance(created, Author)

    @pytest.mark.asyncio
    async def test_failed_result_becomes_store_failure(
        self, author_handler, mock_repository, mock_db_session, caplog
    ):
        mock_repository.create.return_value = StoreResult.failed(
            FailureKind.CONFLICT, "IntegrityError: FOREIGN KEY constraint failed"
        )

        with caplog.at_level(logging.ERROR, logger=HANDLER_LOGGER):
            with pytest.raises(StoreFailureError) as exc_info:
                await author_handler.create(
                    mock_db_session, AuthorCreate(firstname="Jane", lastname="Doe")
                )

        assert exc_info.value.kind == "conflict"
        assert "FOREIGN KEY constraint failed" in caplog.text


class TestUpdate:

    @pytest.mark.asyncio
    async def test_id_mismatch_is_rejected_without_store(
        self, book_handler, repository_factory, mock_db_session
    ):
        payload = BookUpdate(id=7, title="T", isbn="1")

        with pytest.raises(ValidationError) as exc_info:
            await book_handler.update(mock_db_session, 5, payload)

        assert exc_info.value.context["path_id"] == 5
        assert exc_info.value.context["body_id"] == 7
        repository_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_positive_id_is_rejected(self, author_handler, mock_db_session):
        with pytest.raises(ValidationError):
            await author_handler.update(
                mock_db_session, 0, AuthorUpdate(id=0, firstname="A", lastname="B")
            )

    @pytest.mark.asyncio
    async def test_absent_body_is_rejected(self, author_handler, mock_db_session):
        with pytest.raises(ValidationError):
            await author_handler.update(mock_db_session, 1, None)

    @pytest.mark.asyncio
    async def test_missing_row_raises_not_found(
        self, author_handler, mock_repository, mock_db_session
    ):
        mock_repository.update.return_value = StoreResult.failed(FailureKind.NOT_FOUND)

        with pytest.raises(NotFoundError):
            await author_handler.update(
                mock_db_session, 4, AuthorUpdate(id=4, firstname="A", lastname="B")
            )

    @pytest.mark.asyncio
    async def test_success_passes_full_entity(
        self, author_handler, mock_repository, mock_db_session
    ):
        result = await author_handler.update(
            mock_db_session, 4, AuthorUpdate(id=4, firstname="Janet", lastname="Roe")
        )

        assert result is None
        entity = mock_repository.update.await_args.args[0]
        assert (entity.id, entity.firstname, entity.lastname) == (4, "Janet", "Roe")


class TestDelete:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("entity_id", [0, -3])
    async def test_non_positive_id_never_queries_store(
        self, author_handler, repository_factory, mock_repository, mock_db_session, entity_id
    ):
        with pytest.raises(ValidationError):
            await author_handler.delete(mock_db_session, entity_id)

        repository_factory.assert_not_called()
        mock_repository.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_row_raises_not_found(
        self, author_handler, mock_repository, mock_db_session
    ):
        mock_repository.delete.return_value = StoreResult.failed(FailureKind.NOT_FOUND)

        with pytest.raises(NotFoundError):
            await author_handler.delete(mock_db_session, 999)

    @pytest.mark.asyncio
    async def test_unavailable_store_becomes_store_failure(
        self, author_handler, mock_repository, mock_db_session
    ):
        mock_repository.delete.return_value = StoreResult.failed(
            FailureKind.UNAVAILABLE, "OperationalError: database is locked"
        )

        with pytest.raises(StoreFailureError) as exc_info:
            await author_handler.delete(mock_db_session, 2)

        assert exc_info.value.kind == "unavailable"
        assert exc_info.value.context["entity_id"] == 2

    @pytest.mark.asyncio
    async def test_success(self, author_handler, mock_repository, mock_db_session):
        await author_handler.delete(mock_db_session, 2)
        mock_repository.delete.assert_awaited_once_with(2)
