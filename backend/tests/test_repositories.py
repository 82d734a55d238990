"""
Bookstore API — Repository Tests
=================================

What:  SqlAlchemyRepository behaviour against a real in-memory SQLite
       database, plus failure classification with a mocked session.

What we test:
    ✅ create assigns an id and loads relationships
    ✅ update/delete report NOT_FOUND from a single conditional statement
    ✅ foreign key violations come back as CONFLICT, not as an exception
    ✅ connectivity failures on reads raise StoreError(kind="unavailable")
    ✅ deleting an author keeps their books with author_id NULL
"""

import pytest
from sqlalchemy.exc import OperationalError

from bookstore_api.exceptions import StoreError
from bookstore_api.models import Author, Book
from bookstore_api.repositories import AuthorRepository, BookRepository, FailureKind, StoreResult
from bookstore_api.repositories.base import classify_failure


class TestAuthorRepository:

    @pytest.mark.asyncio
    async def test_find_all_empty(self, db_session):
        assert await AuthorRepository(db_session).find_all() == []

    @pytest.mark.asyncio
    async def test_create_assigns_id(self, db_session):
        repo = AuthorRepository(db_session)
        author = Author(firstname="Jane", lastname="Doe")

        result = await repo.create(author)

        assert result.ok
        assert author.id is not None and author.id > 0
        assert author.books == []

    @pytest.mark.asyncio
    async def test_find_by_id_and_exists(self, db_session):
        repo = AuthorRepository(db_session)
        author = Author(firstname="Jane", lastname="Doe")
        await repo.create(author)

        found = await repo.find_by_id(author.id)

        assert found is not None
        assert found.lastname == "Doe"
        assert await repo.exists(author.id) is True
        assert await repo.find_by_id(999) is None
        assert await repo.exists(999) is False

    @pytest.mark.asyncio
    async def test_update_replaces_fields(self, db_session):
        repo = AuthorRepository(db_session)
        author = Author(firstname="Jane", lastname="Doe")
        await repo.create(author)
        await db_session.commit()
        author_id = author.id

        result = await repo.update(Author(id=author_id, firstname="Janet", lastname="Roe"))
        await db_session.commit()
        db_session.expire_all()

        assert result.ok
        reloaded = await repo.find_by_id(author_id)
        assert (reloaded.firstname, reloaded.lastname) == ("Janet", "Roe")

    @pytest.mark.asyncio
    async def test_update_missing_row_is_not_found(self, db_session):
        result = await AuthorRepository(db_session).update(
            Author(id=999, firstname="No", lastname="One")
        )
        assert result.failure is FailureKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_missing_row_is_not_found(self, db_session):
        result = await AuthorRepository(db_session).delete(999)
        assert not result.ok
        assert result.failure is FailureKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_removes_row(self, db_session):
        repo = AuthorRepository(db_session)
        author = Author(firstname="Jane", lastname="Doe")
        await repo.create(author)

        result = await repo.delete(author.id)

        assert result.ok
        assert await repo.exists(author.id) is False


class TestBookRepository:

    @pytest.mark.asyncio
    async def test_unknown_author_is_conflict(self, db_session):
        result = await BookRepository(db_session).create(
            Book(title="Orphan", isbn="000", author_id=42)
        )

        assert result.failure is FailureKind.CONFLICT
        assert "IntegrityError" in result.detail
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_author_books_loaded_after_create(self, db_session):
        author = Author(firstname="Stephen", lastname="King")
        await AuthorRepository(db_session).create(author)
        author_id = author.id
        await BookRepository(db_session).create(Book(title="It", isbn="111", author_id=author_id))
        await db_session.commit()
        db_session.expire_all()

        reloaded = await AuthorRepository(db_session).find_by_id(author_id)

        assert [b.title for b in reloaded.books] == ["It"]

    @pytest.mark.asyncio
    async def test_deleting_author_nulls_book_reference(self, db_session):
        author = Author(firstname="Stephen", lastname="King")
        await AuthorRepository(db_session).create(author)
        book = Book(title="It", isbn="111", author_id=author.id)
        await BookRepository(db_session).create(book)
        await db_session.commit()
        author_id, book_id = author.id, book.id

        result = await AuthorRepository(db_session).delete(author_id)
        await db_session.commit()
        db_session.expire_all()

        assert result.ok
        survivor = await BookRepository(db_session).find_by_id(book_id)
        assert survivor is not None
        assert survivor.author_id is None


class TestFailureHandling:

    @pytest.mark.asyncio
    async def test_read_connectivity_failure_raises_store_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("connection refused")
        )

        with pytest.raises(StoreError) as exc_info:
            await BookRepository(mock_db_session).find_all()

        assert exc_info.value.kind == FailureKind.UNAVAILABLE.value
        assert "connection refused" in exc_info.value.context["error"]

    @pytest.mark.asyncio
    async def test_write_connectivity_failure_is_result(self, mock_db_session):
        mock_db_session.flush.side_effect = OperationalError(
            "INSERT", {}, Exception("server closed the connection")
        )

        result = await AuthorRepository(mock_db_session).create(
            Author(firstname="Jane", lastname="Doe")
        )

        assert result.failure is FailureKind.UNAVAILABLE
        assert "server closed the connection" in result.detail

    @pytest.mark.asyncio
    async def test_out_of_range_id_is_absent_without_a_query(self, mock_db_session):
        repo = AuthorRepository(mock_db_session)
        too_big = 2**63

        assert await repo.find_by_id(too_big) is None
        assert await repo.exists(too_big) is False
        assert (await repo.delete(too_big)).failure is FailureKind.NOT_FOUND
        updated = await repo.update(Author(id=too_big, firstname="No", lastname="One"))
        assert updated.failure is FailureKind.NOT_FOUND
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_id_just_past_integer_column_is_not_found(self, db_session):
        repo = BookRepository(db_session)

        assert await repo.find_by_id(2**31) is None
        assert (await repo.delete(2**31)).failure is FailureKind.NOT_FOUND

    def test_classify_unknown(self):
        assert classify_failure(ValueError("boom")) is FailureKind.UNKNOWN

    def test_store_result_helpers(self):
        assert StoreResult.success().ok
        failed = StoreResult.failed(FailureKind.CONFLICT, "dup")
        assert not failed.ok
        assert failed.detail == "dup"
