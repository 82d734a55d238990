"""
Bookstore API — CRUD Router Factory
====================================

What:  Builds the five-endpoint router of one entity from its CrudHandler.
How:   The endpoint functions are closures over the handler, so the DTO
       types in their signatures are the resource's own and FastAPI
       validates and documents each entity correctly.
Who:   create_app() calls build_crud_router() once per resource.

Routes (for resource name "Authors", prefix "/api"):
    GET    /api/Authors         → 200 list
    GET    /api/Authors/{id}    → 200 | 404
    POST   /api/Authors         → 201 + Location | 400
    PUT    /api/Authors/{id}    → 204 | 400 | 404
    DELETE /api/Authors/{id}    → 204 | 400 | 404
    any of them                 → 500 on store failure

Routes stay thin: parse the request, call the handler, shape the response.
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore_api.database import get_db_session
from bookstore_api.schemas.common import ErrorResponse
from bookstore_api.services.crud_handler import CrudHandler

SERVER_ERROR = {500: {"description": "Store failure", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid input", "model": ErrorResponse}}
NOT_FOUND = {404: {"description": "No entity with this id"}}


def build_crud_router(handler: CrudHandler, prefix: str = "/api") -> APIRouter:
    """Create the router exposing `handler` under `{prefix}/{resource.name}`."""
    resource = handler.resource
    create_schema = resource.create_schema
    update_schema = resource.update_schema
    read_schema = resource.read_schema
    get_route_name = f"get_{resource.slug}"

    router = APIRouter(prefix=f"{prefix}/{resource.name}", tags=[resource.name])

    @router.get(
        "",
        name=f"list_{resource.slug}",
        response_model=List[read_schema],
        responses=SERVER_ERROR,
        summary=f"List all {resource.name}",
    )
    async def list_entities(db: AsyncSession = Depends(get_db_session)):
        return await handler.list(db)

    @router.get(
        "/{entity_id}",
        name=get_route_name,
        response_model=read_schema,
        responses={**NOT_FOUND, **SERVER_ERROR},
        summary=f"Get one of {resource.name} by id",
    )
    async def get_entity(entity_id: int, db: AsyncSession = Depends(get_db_session)):
        return await handler.get(db, entity_id)

    @router.post(
        "",
        name=f"create_{resource.slug}",
        response_model=read_schema,
        status_code=status.HTTP_201_CREATED,
        responses={**BAD_REQUEST, **SERVER_ERROR},
        summary=f"Create one of {resource.name}",
    )
    async def create_entity(
        request: Request,
        response: Response,
        payload: Optional[create_schema] = Body(default=None),
        db: AsyncSession = Depends(get_db_session),
    ):
        created = await handler.create(db, payload)
        response.headers["Location"] = str(request.url_for(get_route_name, entity_id=created.id))
        return created

    @router.put(
        "/{entity_id}",
        name=f"update_{resource.slug}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
        summary=f"Replace one of {resource.name}",
    )
    async def update_entity(
        entity_id: int,
        payload: Optional[update_schema] = Body(default=None),
        db: AsyncSession = Depends(get_db_session),
    ) -> Response:
        await handler.update(db, entity_id, payload)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.delete(
        "/{entity_id}",
        name=f"delete_{resource.slug}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
        summary=f"Delete one of {resource.name}",
    )
    async def delete_entity(entity_id: int, db: AsyncSession = Depends(get_db_session)) -> Response:
        await handler.delete(db, entity_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
