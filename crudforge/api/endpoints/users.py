"""
User Routes

Standard CRUD endpoints for users, mounted at /api/users.

This module has the same shape `crudforge-generate model` emits, so
`crudforge-generate crud --name User` can upgrade it to a dedicated
controller.
"""
from fastapi import APIRouter

from crudforge.api.routes import build_routes
from crudforge.controllers.base import ResourceHandle
from crudforge.models.user import user_schema
from crudforge.registry import ResourceDefinition
from crudforge.schemas.user import UserValidation


def build_router(handle: ResourceHandle) -> APIRouter:
    router = APIRouter()

    # Custom routes go here, above the generic ones so /{id} does not shadow them
    # @router.get("/profile")
    # async def profile():
    #     ...

    return build_routes(handle, UserValidation, router=router)


resource = ResourceDefinition(
    schema=user_schema,
    validation=UserValidation,
    router_factory=build_router,
)
