"""REST endpoints for the CRM entities.

GET    /api/<entity>        list (filters, search, sort, pagination)
POST   /api/<entity>        create
GET    /api/<entity>/{id}   fetch
PUT    /api/<entity>/{id}   full update
DELETE /api/<entity>/{id}   delete
"""

from uuid import UUID

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel

from api.base import message_response
from core.models import (
    ClientCreate, ClientUpdate,
    ContractCreate, ContractUpdate,
    ProcurementStepCreate, ProcurementStepUpdate,
    TaskCreate, TaskUpdate,
)
from core.services.base import CrudService, MAX_LIST_LIMIT

# Query parameters consumed by the list endpoint itself; everything else is a filter.
_LIST_CONTROL_PARAMS = {"sort", "order", "limit", "offset", "search"}


def create_resource_router(
    path: str,
    service: CrudService,
    create_model: type[BaseModel],
    update_model: type[BaseModel],
) -> APIRouter:
    """Build the five CRUD routes for one entity under /<path>."""
    router = APIRouter(prefix=f"/{path}", tags=[path])
    entity = service.ENTITY

    @router.get("")
    async def list_entities(
        request: Request,
        sort: str | None = Query(None),
        order: str | None = Query(None, pattern="^(asc|desc)$"),
        limit: int = Query(100, ge=1, le=MAX_LIST_LIMIT),
        offset: int = Query(0, ge=0),
        search: str | None = Query(None, max_length=200),
    ):
        filters = {
            key: value
            for key, value in request.query_params.items()
            if key not in _LIST_CONTROL_PARAMS
        }
        descending = None if order is None else order == "desc"
        items = service.list_all(
            filters=filters,
            sort=sort,
            descending=descending,
            limit=limit,
            offset=offset,
            search=search,
        )
        return [item.model_dump(mode="json") for item in items]

    @router.post("", status_code=201)
    async def create_entity(body: create_model):  # type: ignore[valid-type]
        return service.create(body).model_dump(mode="json")

    @router.get("/{entity_id}")
    async def get_entity(entity_id: UUID):
        return service.get(entity_id).model_dump(mode="json")

    @router.put("/{entity_id}")
    async def update_entity(entity_id: UUID, body: update_model):  # type: ignore[valid-type]
        return service.update(entity_id, body).model_dump(mode="json")

    @router.delete("/{entity_id}")
    async def delete_entity(entity_id: UUID):
        deleted = service.delete(entity_id)
        return message_response(f'{entity} "{service.label(deleted)}" deleted successfully')

    return router


def create_resources_router(services: dict) -> APIRouter:
    """All entity routers, keyed by the service dict built in main."""
    router = APIRouter()
    router.include_router(
        create_resource_router("clients", services["client"], ClientCreate, ClientUpdate)
    )
    router.include_router(
        create_resource_router("contracts", services["contract"], ContractCreate, ContractUpdate)
    )
    router.include_router(
        create_resource_router(
            "procurement", services["procurement"], ProcurementStepCreate, ProcurementStepUpdate
        )
    )
    router.include_router(
        create_resource_router("tasks", services["task"], TaskCreate, TaskUpdate)
    )
    return router
