"""
Bookstore API — Repository Contract & SQLAlchemy Base Repository
=================================================================

What:  The persistence contract every entity repository fulfils, the tagged
       result type its writes return, and a generic SQLAlchemy
       implementation.
How:   SqlAlchemyRepository is parameterised by an ORM model class. Each
       instance wraps the AsyncSession of a single request.
Who:   CrudHandler talks to repositories only through EntityRepository.

Contract:
    find_all()        → list of entities          (raises StoreError)
    find_by_id(id)    → entity or None            (raises StoreError)
    exists(id)        → bool                      (raises StoreError)
    create(entity)    → StoreResult, id populated on success
    update(entity)    → StoreResult, NOT_FOUND when no row has entity.id
    delete(id)        → StoreResult, NOT_FOUND when no row has id

Writes never raise for store-level failures. Update and delete are single
conditional statements, so "does the row exist" and "write it" are answered
by one store round-trip. An id outside the range of the primary key column
cannot name a row, so it is answered as absent without a statement.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Optional, Protocol, Sequence, Type, TypeVar

from sqlalchemy import BigInteger, Integer, SmallInteger, delete, exists as sql_exists, inspect, select, update
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore_api.database import Base
from bookstore_api.exceptions import StoreError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# Largest value each integer column type holds; subclasses listed before Integer
INTEGER_LIMITS = (
    (BigInteger, 2**63 - 1),
    (SmallInteger, 2**15 - 1),
    (Integer, 2**31 - 1),
)


class FailureKind(str, Enum):
    """Why a store write did not succeed."""

    CONFLICT = "conflict"          # integrity constraint violated
    UNAVAILABLE = "unavailable"    # connection lost, timeout, database down
    NOT_FOUND = "not_found"        # conditional write matched no row
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class StoreResult:
    """
    Outcome of a repository write.

    `failure` is None on success. `detail` holds the diagnostic text of the
    underlying error; it is meant for logs only.
    """

    failure: Optional[FailureKind] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls) -> "StoreResult":
        return cls()

    @classmethod
    def failed(cls, kind: FailureKind, detail: str = "") -> "StoreResult":
        return cls(failure=kind, detail=detail)


def classify_failure(exc: BaseException) -> FailureKind:
    """Map a SQLAlchemy exception onto a FailureKind."""
    if isinstance(exc, IntegrityError):
        return FailureKind.CONFLICT
    if isinstance(exc, (OperationalError, InterfaceError)):
        return FailureKind.UNAVAILABLE
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return FailureKind.UNAVAILABLE
    if isinstance(exc, OSError):
        return FailureKind.UNAVAILABLE
    return FailureKind.UNKNOWN


class EntityRepository(Protocol[ModelT]):
    """Capability interface consumed by CrudHandler."""

    async def find_all(self) -> Sequence[ModelT]: ...

    async def find_by_id(self, entity_id: int) -> Optional[ModelT]: ...

    async def exists(self, entity_id: int) -> bool: ...

    async def create(self, entity: ModelT) -> StoreResult: ...

    async def update(self, entity: ModelT) -> StoreResult: ...

    async def delete(self, entity_id: int) -> StoreResult: ...


class SqlAlchemyRepository(Generic[ModelT]):
    """
    Generic repository over one ORM model.

    Subclasses only set `model`. The session is owned by the request
    (see database.get_db_session): this class flushes but never commits.
    """

    model: Type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    @property
    def _name(self) -> str:
        return self.model.__name__

    # ── Reads ─────────────────────────────────────────────────────────────

    async def find_all(self) -> List[ModelT]:
        try:
            result = await self.session.execute(select(self.model))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._read_error("find_all", e)

    async def find_by_id(self, entity_id: int) -> Optional[ModelT]:
        if not self._id_fits(entity_id):
            return None
        try:
            result = await self.session.execute(
                select(self.model).where(self.model.id == entity_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._read_error("find_by_id", e, entity_id)

    async def exists(self, entity_id: int) -> bool:
        if not self._id_fits(entity_id):
            return False
        try:
            result = await self.session.execute(
                select(sql_exists().where(self.model.id == entity_id))
            )
            return bool(result.scalar())
        except SQLAlchemyError as e:
            raise self._read_error("exists", e, entity_id)

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, entity: ModelT) -> StoreResult:
        try:
            self.session.add(entity)
            await self.session.flush()
            # Reload server-side values and eager relationships for the response
            await self.session.refresh(entity)
        except SQLAlchemyError as e:
            return self._write_failure("create", e)
        logger.debug("%s created with id %s", self._name, entity.id)
        return StoreResult.success()

    async def update(self, entity: ModelT) -> StoreResult:
        if not self._id_fits(entity.id):
            return self._not_found(entity.id)
        values = self._column_values(entity)
        statement = (
            update(self.model)
            .where(self.model.id == entity.id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            return self._write_failure("update", e, entity.id)
        if result.rowcount == 0:
            return self._not_found(entity.id)
        return StoreResult.success()

    async def delete(self, entity_id: int) -> StoreResult:
        if not self._id_fits(entity_id):
            return self._not_found(entity_id)
        statement = (
            delete(self.model)
            .where(self.model.id == entity_id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            return self._write_failure("delete", e, entity_id)
        if result.rowcount == 0:
            return self._not_found(entity_id)
        return StoreResult.success()

    # ── Helpers ───────────────────────────────────────────────────────────

    def _id_fits(self, entity_id: int) -> bool:
        """Whether `entity_id` is storable in the model's primary key column."""
        column_type = inspect(self.model).columns["id"].type
        for type_, limit in INTEGER_LIMITS:
            if isinstance(column_type, type_):
                return -limit - 1 <= entity_id <= limit
        return True

    def _not_found(self, entity_id: int) -> StoreResult:
        return StoreResult.failed(FailureKind.NOT_FOUND, f"no {self._name} with id {entity_id}")

    def _column_values(self, entity: ModelT) -> dict:
        """Every mapped column except the primary key; update is a full replace."""
        mapper = inspect(self.model)
        return {
            attr.key: getattr(entity, attr.key)
            for attr in mapper.column_attrs
            if attr.key != "id"
        }

    def _read_error(self, operation: str, exc: SQLAlchemyError, entity_id: Optional[int] = None) -> StoreError:
        kind = classify_failure(exc)
        context = {"entity": self._name, "operation": operation, "error": str(exc)}
        if entity_id is not None:
            context["entity_id"] = entity_id
        return StoreError(message=f"{self._name} {operation} failed", kind=kind.value, context=context)

    def _write_failure(self, operation: str, exc: SQLAlchemyError, entity_id: Optional[int] = None) -> StoreResult:
        kind = classify_failure(exc)
        logger.warning(
            "%s %s failed (%s) for id %s: %s",
            self._name, operation, kind.value, entity_id, exc,
        )
        return StoreResult.failed(kind, f"{type(exc).__name__}: {exc}")
