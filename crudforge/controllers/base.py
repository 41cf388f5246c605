"""
Generic Resource Controller

CRUD operations that work against any collection. A ResourceHandle binds a
collection to its schema; every operation takes the handle explicitly and
returns an envelope response.

Operations do not catch persistence errors. Anything other than a missing
document propagates to the error handlers registered in core.errors, so a
failed request never writes a partial body.

A dedicated controller for one resource is just another module exposing the
same six coroutines (usually re-exported from here) plus its own extras.
"""
import json
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from crudforge.core import responses
from crudforge.core.exceptions import BadRequestError
from crudforge.models.base import CREATED_AT, ID_FIELD, ResourceSchema
from crudforge.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_SORT_DIRECTIONS = {
    1: ASCENDING,
    -1: DESCENDING,
    "1": ASCENDING,
    "-1": DESCENDING,
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
}


@dataclass(frozen=True)
class ResourceHandle:
    """A collection plus the schema its documents follow."""
    collection: Any
    schema: ResourceSchema
    default_limit: int = DEFAULT_LIMIT

    @property
    def name(self) -> str:
        return self.schema.name


@dataclass
class ListQuery:
    """Parsed list parameters."""
    filter: Dict[str, Any]
    sort: List[Tuple[str, int]]
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def parse_positive_int(value: Optional[str], default: int) -> int:
    """Parse a query value, falling back to `default` when absent, non-numeric or < 1."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _parse_json_object(raw: str, message: str) -> Dict[str, Any]:
    try:
        value = json.loads(raw)
    except ValueError:
        raise BadRequestError(message)
    if not isinstance(value, dict):
        raise BadRequestError(message)
    return value


def parse_sort(raw: Optional[str]) -> List[Tuple[str, int]]:
    """Parse a JSON sort object. Without one, newest documents come first."""
    if raw is None:
        return [(CREATED_AT, DESCENDING)]
    spec = _parse_json_object(raw, "Invalid sort format")
    sort = []
    for field, direction in spec.items():
        key = direction.lower() if isinstance(direction, str) else direction
        if isinstance(key, bool) or not isinstance(key, (int, str)) or key not in _SORT_DIRECTIONS:
            raise BadRequestError("Invalid sort format")
        sort.append((field, _SORT_DIRECTIONS[key]))
    return sort


def parse_list_query(params: Mapping[str, str], schema: ResourceSchema,
                     default_limit: int = DEFAULT_LIMIT) -> ListQuery:
    """
    Build the filter/sort/page parameters of a list request.

    `filter` and `sort` are JSON objects; an `isActive` parameter overrides
    any isActive key inside the filter.
    """
    page = parse_positive_int(params.get("page"), DEFAULT_PAGE)
    limit = parse_positive_int(params.get("limit"), default_limit)

    filter_: Dict[str, Any] = {}
    if params.get("filter") is not None:
        filter_ = _parse_json_object(params["filter"], "Invalid filter format")

    if params.get("isActive") is not None:
        filter_["isActive"] = params["isActive"] == "true"

    sort = parse_sort(params.get("sort"))

    return ListQuery(
        filter=schema.cast_filter(filter_),
        sort=sort,
        page=page,
        limit=limit,
    )


async def create(handle: ResourceHandle, payload: Mapping[str, Any]):
    """Insert a new document."""
    document = handle.schema.prepare_insert(payload)
    result = await handle.collection.insert_one(document)
    document[ID_FIELD] = result.inserted_id

    logger.info(f"{handle.name} created: {result.inserted_id}", extra={"resource": handle.name})

    return responses.success(
        201, "Resource created successfully", handle.schema.to_public(document)
    )


async def list_resources(handle: ResourceHandle, params: Mapping[str, str]):
    """List documents with filtering, sorting and pagination."""
    query = parse_list_query(params, handle.schema, handle.default_limit)

    cursor = handle.collection.find(query.filter)
    if query.sort:
        cursor = cursor.sort(query.sort)
    cursor = cursor.skip(query.skip).limit(query.limit)
    documents = await cursor.to_list(length=query.limit)

    # Total ignores pagination
    total = await handle.collection.count_documents(query.filter)

    meta = {
        "page": query.page,
        "limit": query.limit,
        "total": total,
        "pages": math.ceil(total / query.limit),
    }

    logger.debug(f"Listed {len(documents)} of {total} {handle.name} documents")

    return responses.success(
        200,
        "Resources retrieved successfully",
        [handle.schema.to_public(document) for document in documents],
        meta,
    )


async def get_by_id(handle: ResourceHandle, resource_id: str):
    """Fetch one document. A missing document is a 404, a malformed id a 400."""
    document = await handle.collection.find_one({ID_FIELD: handle.schema.cast_id(resource_id)})

    if document is None:
        return responses.not_found()

    return responses.success(
        200, "Resource retrieved successfully", handle.schema.to_public(document)
    )


async def update(handle: ResourceHandle, resource_id: str, partial: Mapping[str, Any]):
    """Apply a partial update and return the updated document."""
    object_id = handle.schema.cast_id(resource_id)
    changes = handle.schema.prepare_update(partial)

    document = await handle.collection.find_one_and_update(
        {ID_FIELD: object_id},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )

    if document is None:
        return responses.not_found()

    logger.info(f"{handle.name} updated: {resource_id}", extra={"resource": handle.name})

    return responses.success(
        200, "Resource updated successfully", handle.schema.to_public(document)
    )


async def soft_delete(handle: ResourceHandle, resource_id: str):
    """
    Mark a document inactive. The document stays in the collection.

    Repeating the call keeps succeeding until the document is hard-deleted.
    """
    object_id = handle.schema.cast_id(resource_id)
    changes = handle.schema.prepare_update({"isActive": False})

    document = await handle.collection.find_one_and_update(
        {ID_FIELD: object_id},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )

    if document is None:
        return responses.not_found()

    logger.info(f"{handle.name} soft-deleted: {resource_id}", extra={"resource": handle.name})

    return responses.success(200, "Resource deleted successfully")


async def hard_delete(handle: ResourceHandle, resource_id: str):
    """Remove a document for good, returning it as it was before removal."""
    object_id = handle.schema.cast_id(resource_id)

    document = await handle.collection.find_one_and_delete({ID_FIELD: object_id})

    if document is None:
        return responses.not_found()

    logger.info(f"{handle.name} permanently deleted: {resource_id}", extra={"resource": handle.name})

    return responses.success(
        200, "Resource permanently deleted", handle.schema.to_public(document)
    )
