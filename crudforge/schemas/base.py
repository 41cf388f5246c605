"""
Validation Schema Base

Request bodies are checked against a pair of pydantic models per resource:
`create` (required fields enforced) and `update` (same fields, all optional).
Optional means the key may be left out, not sent as null.
"""
from dataclasses import dataclass
from typing import Annotated, Any, Optional, Type

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

# 24 hex characters, the textual form of an ObjectId
ObjectIdStr = Annotated[str, Field(pattern=r"^[0-9a-fA-F]{24}$")]


class RequestSchema(BaseModel):
    """Base for request body schemas. Unknown keys and explicit nulls are rejected."""

    class Config:
        extra = "forbid"

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise PydanticCustomError("null_value", "Field may not be null")
        return value


@dataclass(frozen=True)
class ValidationSchemas:
    """The create/update pair for one resource. Either may be absent."""
    create: Optional[Type[BaseModel]] = None
    update: Optional[Type[BaseModel]] = None
