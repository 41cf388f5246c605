"""
Scaffolding inputs: the resource name and its field descriptors.
"""
import enum
import keyword
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from crudforge.utils.naming import pluralize, route_segment, to_camel_case, to_pascal_case, to_snake_case

# Set by the service on every document
RESERVED_FIELD_NAMES = frozenset({"id", "isActive", "createdAt", "updatedAt"})


class FieldType(str, enum.Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    REFERENCE = "reference"
    ARRAY = "array"
    OBJECT = "object"

    @classmethod
    def parse(cls, value: str) -> "FieldType":
        """Parse operator input. `objectid` means reference; unknown names fall back to string."""
        text = value.strip().lower()
        if text == "objectid":
            return cls.REFERENCE
        try:
            return cls(text)
        except ValueError:
            return cls.STRING


class FieldDescriptor(BaseModel):
    """One model field as described by the operator."""

    name: str = Field(..., min_length=1)
    type: FieldType = FieldType.STRING
    required: bool = False
    unique: bool = False
    default: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_is_identifier(cls, value: str) -> str:
        value = value.strip()
        if not value.isidentifier() or keyword.iskeyword(value) or value.startswith("_"):
            raise ValueError(f"'{value}' is not a usable field name")
        if value in RESERVED_FIELD_NAMES:
            raise ValueError(f"'{value}' is a reserved field name")
        return value

    @field_validator("default")
    @classmethod
    def empty_default_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        return value

    @model_validator(mode="after")
    def number_default_is_numeric(self) -> "FieldDescriptor":
        if self.type is FieldType.NUMBER and self.default is not None:
            try:
                float(self.default)
            except ValueError:
                raise ValueError(f"default '{self.default}' is not a number")
        return self


@dataclass(frozen=True)
class ResourceName:
    """Every spelling of a resource name the generated files need."""
    pascal: str

    @classmethod
    def parse(cls, raw: str) -> "ResourceName":
        pascal = to_pascal_case(raw)
        if not pascal.isidentifier():
            raise ValueError(f"'{raw}' is not a usable resource name")
        return cls(pascal)

    @property
    def snake(self) -> str:
        return to_snake_case(self.pascal)

    @property
    def camel(self) -> str:
        return to_camel_case(self.pascal)

    @property
    def lower(self) -> str:
        return self.pascal.lower()

    @property
    def plural(self) -> str:
        """Module name of the route-wiring file, e.g. ``order_items``."""
        return pluralize(self.snake)

    @property
    def route_segment(self) -> str:
        return route_segment(self.pascal)
