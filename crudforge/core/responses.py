"""
Response Envelope

Every JSON body the API returns goes through one of these two helpers, so
clients see a single shape regardless of operation or failure kind:

    success -> {"status": "success", "message", "data", "meta"?}
    error   -> {"status": "error", "message", "errors"?}
"""
from typing import Any, Optional

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

# ObjectIds can appear in data (reference fields, raw filters)
_ENCODERS = {ObjectId: str}


def success_body(message: str, data: Any = None, meta: Optional[dict] = None) -> dict:
    body = {"status": "success", "message": message, "data": data}
    if meta is not None:
        body["meta"] = meta
    return jsonable_encoder(body, custom_encoder=_ENCODERS)


def error_body(message: str, errors: Any = None) -> dict:
    body = {"status": "error", "message": message}
    if errors is not None:
        body["errors"] = errors
    return jsonable_encoder(body, custom_encoder=_ENCODERS)


def success(status_code: int, message: str, data: Any = None,
            meta: Optional[dict] = None) -> JSONResponse:
    """Build a success envelope response."""
    return JSONResponse(status_code=status_code, content=success_body(message, data, meta))


def error(status_code: int, message: str, errors: Any = None,
          headers: Optional[dict] = None) -> JSONResponse:
    """Build an error envelope response."""
    return JSONResponse(
        status_code=status_code,
        content=error_body(message, errors),
        headers=headers,
    )


def not_found(message: str = "Resource not found") -> JSONResponse:
    return error(404, message)
