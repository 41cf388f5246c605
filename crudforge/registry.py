"""
Resource Registry

The explicit list of resources the API serves. Each ResourceDefinition
names a schema, its optional validation schemas and, optionally, the
function that wires its routes. The registry is built once at startup and
passed to the application factory; nothing scans the filesystem.

To add a resource, generate it with `crudforge-generate model` and add its
`resource` definition to default_registry() below.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from fastapi import APIRouter

from crudforge.api.routes import build_routes
from crudforge.controllers.base import DEFAULT_LIMIT, ResourceHandle
from crudforge.models.base import ResourceSchema
from crudforge.schemas.base import ValidationSchemas
from crudforge.utils.naming import route_segment


@dataclass(frozen=True)
class ResourceDefinition:
    """Everything needed to serve one resource."""
    schema: ResourceSchema
    validation: Optional[ValidationSchemas] = None
    router_factory: Optional[Callable[[ResourceHandle], APIRouter]] = None
    path: Optional[str] = None

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def route_path(self) -> str:
        return self.path or f"/{route_segment(self.schema.name)}"

    def bind(self, database: Any, default_limit: int = DEFAULT_LIMIT) -> ResourceHandle:
        """Bind the schema to its collection in `database`."""
        return ResourceHandle(
            collection=database[self.schema.collection_name],
            schema=self.schema,
            default_limit=default_limit,
        )

    def build_router(self, database: Any, default_limit: int = DEFAULT_LIMIT) -> APIRouter:
        handle = self.bind(database, default_limit)
        if self.router_factory is not None:
            return self.router_factory(handle)
        return build_routes(handle, self.validation)


class ResourceRegistry:
    """Ordered collection of resource definitions keyed by route path."""

    def __init__(self, definitions: Iterable[ResourceDefinition] = ()):
        self._definitions: Dict[str, ResourceDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: ResourceDefinition) -> ResourceDefinition:
        if definition.route_path in self._definitions:
            raise ValueError(f"Resource path already registered: {definition.route_path}")
        self._definitions[definition.route_path] = definition
        return definition

    def get(self, route_path: str) -> Optional[ResourceDefinition]:
        return self._definitions.get(route_path)

    @property
    def paths(self) -> List[str]:
        return list(self._definitions)

    def __iter__(self) -> Iterator[ResourceDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)


def default_registry() -> ResourceRegistry:
    """The resources this service ships with."""
    from crudforge.api.endpoints import users

    return ResourceRegistry([
        users.resource,
    ])
