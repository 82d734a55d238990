"""
Bookstore API — Generic CRUD Handler
=====================================

What:  The request logic shared by every entity endpoint: list, get,
       create, update, delete.
How:   One CrudHandler per EntityResource. Each operation runs the same
       pipeline and raises the application exception that decides the
       HTTP status; main.py renders those exceptions.
Who:   Called by the routers from routes/crud.py with the request's session.

Pipeline (per operation):
    ┌──────────┐   ┌───────────┐   ┌─────────┐   ┌────────────┐   ┌─────────┐
    │ Validate │──▶│ Existence │──▶│   Map   │──▶│  Execute   │──▶│ Respond │
    │  (400)   │   │   (404)   │   │ DTO→ORM │   │   (500)    │   │ ORM→DTO │
    └──────────┘   └───────────┘   └─────────┘   └────────────┘   └─────────┘

    Update and delete fold the existence check into the write: the
    repository's conditional statement reports NOT_FOUND itself.

Error Handling:
    ValidationError / NotFoundError / StoreFailureError propagate unchanged.
    Anything else raised inside an operation, including StoreError from a
    repository read, is logged with full detail and replaced by a
    StoreFailureError, whose client-facing message is always generic.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore_api.exceptions import (
    NotFoundError,
    StoreError,
    StoreFailureError,
    ValidationError,
)
from bookstore_api.log import OperationLogger
from bookstore_api.repositories.base import EntityRepository, FailureKind, StoreResult
from bookstore_api.services.mapper import MappingRegistry
from bookstore_api.services.resources import EntityResource

logger = logging.getLogger(__name__)


class CrudHandler:
    """
    CRUD request logic for one entity type.

    Stateless apart from its immutable resource definition and mapping
    registry, so a single instance serves all concurrent requests.
    """

    def __init__(self, resource: EntityResource, mappings: MappingRegistry):
        self.resource = resource
        self.mappings = mappings

    # ── Operations ────────────────────────────────────────────────────────

    async def list(self, db: AsyncSession) -> List[BaseModel]:
        """Every entity in store order. An empty store gives an empty list."""
        with self._operation("List") as log:
            log.info("Attempting")
            entities = await self._repository(db).find_all()
            response = self.mappings.map_many(entities, self.resource.read_schema)
            log.info("Success, %d records", len(response))
            return response

    async def get(self, db: AsyncSession, entity_id: int) -> BaseModel:
        """
        A single entity as its Read DTO.

        Raises:
            NotFoundError: no entity with `entity_id`
            StoreFailureError: the store failed
        """
        with self._operation("Get", entity_id) as log:
            log.info("Attempting for id:%s", entity_id)
            entity = await self._repository(db).find_by_id(entity_id)
            if entity is None:
                log.warning("Not found for id:%s", entity_id)
                raise NotFoundError(resource=self.resource.name, resource_id=entity_id)
            response = self.mappings.map(entity, self.resource.read_schema)
            log.info("Success for id:%s", entity_id)
            return response

    async def create(self, db: AsyncSession, payload: Optional[BaseModel]) -> BaseModel:
        """
        Persist a new entity from its Create DTO.

        Returns the created entity as its Read DTO; `id` is store-assigned.

        Raises:
            ValidationError: body absent
            StoreFailureError: the store rejected or failed the insert
        """
        with self._operation("Create") as log:
            if payload is None:
                log.warning("failed because empty.")
                raise ValidationError(message="Request body is required", field="body")
            log.info("Attempting for %s", self.resource.describe(payload))

            entity = self.mappings.map(payload, self.resource.model)
            result = await self._repository(db).create(entity)
            self._ensure_success(result, log)

            log.info("Success for id:%s: %s", entity.id, self.resource.describe(entity))
            return self.mappings.map(entity, self.resource.read_schema)

    async def update(self, db: AsyncSession, entity_id: int, payload: Optional[BaseModel]) -> None:
        """
        Replace every field of an existing entity.

        Raises:
            ValidationError: body absent, path id < 1, or body id != path id
            NotFoundError: no entity with `entity_id`
            StoreFailureError: the store failed the update
        """
        with self._operation("Update", entity_id) as log:
            self._validate_id(entity_id, log)
            if payload is None:
                log.warning("failed because empty.")
                raise ValidationError(message="Request body is required", field="body")
            body_id = getattr(payload, "id", None)
            if body_id != entity_id:
                log.warning("failed: path id:%s does not match body id:%s", entity_id, body_id)
                raise ValidationError(
                    message=f"Path id {entity_id} does not match body id {body_id}",
                    field="id",
                    context={"path_id": entity_id, "body_id": body_id},
                )
            log.info("Attempting for id:%s %s", entity_id, self.resource.describe(payload))

            entity = self.mappings.map(payload, self.resource.model)
            result = await self._repository(db).update(entity)
            self._ensure_success(result, log, entity_id)

            log.info("Success for id:%s: %s", entity_id, self.resource.describe(entity))

    async def delete(self, db: AsyncSession, entity_id: int) -> None:
        """
        Hard-delete an entity.

        Raises:
            ValidationError: id < 1 (the store is not queried)
            NotFoundError: no entity with `entity_id`
            StoreFailureError: the store failed the delete
        """
        with self._operation("Delete", entity_id) as log:
            self._validate_id(entity_id, log)
            log.info("Attempting for id:%s", entity_id)

            result = await self._repository(db).delete(entity_id)
            self._ensure_success(result, log, entity_id)

            log.info("Success for id:%s", entity_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    def _repository(self, db: AsyncSession) -> EntityRepository:
        return self.resource.repository_factory(db)

    def _logger(self, operation: str) -> OperationLogger:
        return OperationLogger(logger, self.resource.name, operation)

    @contextmanager
    def _operation(self, operation: str, entity_id: Optional[int] = None) -> Iterator[OperationLogger]:
        """
        Outermost boundary of one handler operation.

        Known application errors pass through; everything else becomes a
        StoreFailureError after its detail has been logged.
        """
        log = self._logger(operation)
        try:
            yield log
        except (ValidationError, NotFoundError, StoreFailureError):
            raise
        except StoreError as e:
            raise self._internal_error(
                log, entity_id, kind=e.kind, detail=str(e.context.get("error", e.message)),
            ) from e
        except Exception as e:
            raise self._internal_error(
                log, entity_id, kind=FailureKind.UNKNOWN.value, detail=f"{type(e).__name__}: {e}",
                exc_info=True,
            ) from e

    def _validate_id(self, entity_id: int, log: OperationLogger) -> None:
        if entity_id < 1:
            log.warning("failed with invalid id:%s", entity_id)
            raise ValidationError(
                message="Id must be a positive integer",
                field="id",
                context={"path_id": entity_id},
            )

    def _ensure_success(
        self,
        result: StoreResult,
        log: OperationLogger,
        entity_id: Optional[int] = None,
    ) -> None:
        """Turn a failed StoreResult into the matching application error."""
        if result.ok:
            return
        if result.failure is FailureKind.NOT_FOUND:
            log.warning("Not found for id:%s", entity_id)
            raise NotFoundError(resource=self.resource.name, resource_id=entity_id)
        raise self._internal_error(log, entity_id, kind=result.failure.value, detail=result.detail)

    def _internal_error(
        self,
        log: OperationLogger,
        entity_id: Optional[int],
        kind: str,
        detail: Any,
        exc_info: bool = False,
    ) -> StoreFailureError:
        """Log the full failure server-side and build the generic 500 error."""
        if entity_id is None:
            log.error("Error occurred (%s): %s", kind, detail, exc_info=exc_info)
        else:
            log.error("Error for id:%s (%s): %s", entity_id, kind, detail, exc_info=exc_info)
        context = {
            "resource": self.resource.name,
            "operation": log.extra["operation"],
            "detail": str(detail),
        }
        if entity_id is not None:
            context["entity_id"] = entity_id
        return StoreFailureError(kind=kind, context=context)
