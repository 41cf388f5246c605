"""
Route Factory

Binds the standard CRUD endpoints of one resource to controller operations:

    POST   /                   -> create      (create schema gate)
    GET    /                   -> list
    GET    /{id}               -> get by id
    PUT    /{id}, PATCH /{id}  -> update      (update schema gate)
    DELETE /{id}               -> soft delete
    DELETE /{id}/permanent     -> hard delete
"""
from types import ModuleType
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status

from crudforge.api.validation import validation_gate
from crudforge.controllers import base as base_controller
from crudforge.controllers.base import ResourceHandle
from crudforge.schemas.base import ValidationSchemas


def build_routes(
    handle: ResourceHandle,
    validation: Optional[ValidationSchemas] = None,
    controller: ModuleType = base_controller,
    router: Optional[APIRouter] = None,
) -> APIRouter:
    """
    Build (or extend) a router with the standard endpoints for `handle`.

    `validation` is optional; a missing create/update schema means request
    bodies pass through unchecked. `controller` is any module exposing the
    six operations of controllers.base. Pass an existing `router` to keep
    custom routes registered on it ahead of the `/{id}` routes.
    """
    schemas = validation or ValidationSchemas()
    router = router if router is not None else APIRouter()
    if not router.tags:
        router.tags = [handle.schema.collection_name]

    create_gate = validation_gate(schemas.create)
    update_gate = validation_gate(schemas.update)

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_resource(payload: Dict[str, Any] = Depends(create_gate)):
        return await controller.create(handle, payload)

    @router.get("")
    async def list_resources(request: Request):
        return await controller.list_resources(handle, request.query_params)

    @router.get("/{resource_id}")
    async def get_resource(resource_id: str):
        return await controller.get_by_id(handle, resource_id)

    @router.api_route("/{resource_id}", methods=["PUT", "PATCH"])
    async def update_resource(resource_id: str, payload: Dict[str, Any] = Depends(update_gate)):
        return await controller.update(handle, resource_id, payload)

    @router.delete("/{resource_id}")
    async def soft_delete_resource(resource_id: str):
        return await controller.soft_delete(handle, resource_id)

    @router.delete("/{resource_id}/permanent")
    async def hard_delete_resource(resource_id: str):
        return await controller.hard_delete(handle, resource_id)

    return router
