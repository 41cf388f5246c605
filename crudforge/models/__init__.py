"""
Document Models

One schema module per resource, each built with create_schema() so every
document shares the common fields and the same output transform.
"""
from crudforge.models.base import FieldSpec, ResourceSchema, create_schema

__all__ = ["FieldSpec", "ResourceSchema", "create_schema"]
