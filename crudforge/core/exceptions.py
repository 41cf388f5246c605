"""
Custom Exceptions

Centralized exception definitions. The HTTP-aware ones subclass FastAPI's
HTTPException; the schema-layer ones mirror the error shapes a document
store produces and are mapped to HTTP responses by core.errors.
"""
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class BadRequestError(HTTPException):
    """Raised for malformed client input (filter/sort JSON and similar)."""

    def __init__(self, detail: str = "Bad request"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class RequestValidationFailed(HTTPException):
    """
    Raised by the validation gate when a request body breaks its schema.

    Carries every field error, not just the first one.
    """

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Validation Error"
        )
        self.errors = errors


class DocumentValidationError(Exception):
    """
    Raised by a resource schema when a document fails its field rules.

    `errors` maps each failing field to its message.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        fields = ", ".join(errors)
        super().__init__(f"Document validation failed: {fields}")

    @property
    def messages(self) -> List[str]:
        return list(self.errors.values())


class InvalidIdentifierError(Exception):
    """Raised when a value cannot be cast to the identifier type."""

    def __init__(self, path: str, value: Any, kind: Optional[str] = "ObjectId"):
        self.path = path
        self.value = value
        self.kind = kind
        super().__init__(f'Cast to {kind} failed for value "{value}" at path "{path}"')
