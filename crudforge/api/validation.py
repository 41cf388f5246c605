"""
Validation Gate

Checks a request payload against a pydantic schema and reports every
failing field at once. Used as a FastAPI dependency in front of the create
and update routes.
"""
from typing import Any, Callable, Dict, List, Optional, Type

from fastapi import Body
from pydantic import BaseModel, ValidationError

from crudforge.core.exceptions import RequestValidationFailed


def format_errors(exc: ValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into [{"field": "a.b", "message": ...}]."""
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


def validate(schema: Type[BaseModel], payload: Any) -> Optional[List[Dict[str, str]]]:
    """
    Validate a payload against a schema.

    Returns None when the payload is valid, otherwise the list of field
    errors. The payload itself is never modified.
    """
    try:
        schema.model_validate(payload)
    except ValidationError as exc:
        return format_errors(exc)
    return None


def validation_gate(schema: Optional[Type[BaseModel]]) -> Callable:
    """
    Build a dependency that yields the request body once it passes `schema`.

    With no schema the body passes through unchecked.
    """

    async def dependency(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        if schema is not None:
            errors = validate(schema, payload)
            if errors:
                raise RequestValidationFailed(errors)
        return payload

    return dependency
