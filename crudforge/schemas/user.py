"""
User Schemas

Request validation for the User resource.
"""
from typing import Literal, Optional

from pydantic import EmailStr, Field

from crudforge.schemas.base import RequestSchema, ValidationSchemas


class UserCreate(RequestSchema):
    """Schema for creating a user."""
    name: str
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Optional[Literal["user", "admin"]] = None

    class Config:
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "password": "secretpw",
                "role": "user"
            }
        }


class UserUpdate(RequestSchema):
    """Schema for updating a user. All fields optional."""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[Literal["user", "admin"]] = None


UserValidation = ValidationSchemas(create=UserCreate, update=UserUpdate)
