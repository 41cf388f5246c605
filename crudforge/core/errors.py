"""
Error Normalizer

Maps any failure raised while handling a request onto the error envelope:

    field validation (request or document)  -> 400 "Validation Error"
    malformed identifier / cast failure     -> 400 "Invalid <path>: <value>"
    duplicate unique key                    -> 400 "Duplicate field value entered"
    HTTPException                           -> its own status and detail
    anything else                           -> 500 "Internal Server Error"

Full detail is always logged. Stack traces reach the client only outside
production.
"""
import re
import traceback
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from crudforge.config import Settings, get_settings
from crudforge.core import responses
from crudforge.core.exceptions import (
    DocumentValidationError,
    InvalidIdentifierError,
    RequestValidationFailed,
)
from crudforge.utils.logging import get_logger

logger = get_logger(__name__)

# Fallback when the driver error carries no keyValue details
_DUP_KEY_PATTERN = re.compile(r"dup key: \{ (?P<field>[^:\s]+): (?P<value>.+?) \}")


def _duplicate_key_errors(exc: DuplicateKeyError) -> Optional[Dict[str, Any]]:
    details = exc.details or {}
    key_value = details.get("keyValue")
    if key_value:
        field = next(iter(key_value))
        return {"field": field, "value": key_value[field]}
    match = _DUP_KEY_PATTERN.search(str(exc))
    if match:
        return {"field": match.group("field"), "value": match.group("value").strip('"')}
    return None


def _request_validation_errors(exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(loc), "message": error.get("msg", "")})
    return errors


def normalize_error(exc: Exception, settings: Settings) -> Tuple[int, str, Any]:
    """Infer (status_code, message, errors) for a failure."""
    if isinstance(exc, RequestValidationFailed):
        return 400, "Validation Error", exc.errors

    if isinstance(exc, DocumentValidationError):
        return 400, "Validation Error", exc.messages

    if isinstance(exc, InvalidIdentifierError):
        return 400, f"Invalid {exc.path}: {exc.value}", None

    if isinstance(exc, DuplicateKeyError):
        return 400, "Duplicate field value entered", _duplicate_key_errors(exc)

    if isinstance(exc, RequestValidationError):
        return 400, "Validation Error", _request_validation_errors(exc)

    if isinstance(exc, StarletteHTTPException):
        return exc.status_code, str(exc.detail), None

    errors = None
    if not settings.is_production:
        errors = {
            "type": type(exc).__name__,
            "detail": str(exc),
            "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
    return 500, "Internal Server Error", errors


def register_exception_handlers(app: FastAPI, settings: Optional[Settings] = None) -> None:
    """Route every failure kind through the normalizer."""
    settings = settings or get_settings()

    async def handle_exception(request: Request, exc: Exception):
        status_code, message, errors = normalize_error(exc, settings)
        extra = {
            "path": request.url.path,
            "method": request.method,
            "status_code": status_code,
        }

        if status_code >= 500:
            logger.error(
                f"Unhandled exception: {type(exc).__name__}: {exc}",
                exc_info=exc,
                extra=extra,
            )
        else:
            logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc}", extra=extra)

        headers = getattr(exc, "headers", None) if isinstance(exc, StarletteHTTPException) else None
        return responses.error(status_code, message, errors, headers=headers)

    for exc_class in (
        StarletteHTTPException,
        RequestValidationError,
        DocumentValidationError,
        InvalidIdentifierError,
        DuplicateKeyError,
        Exception,
    ):
        app.add_exception_handler(exc_class, handle_exception)
