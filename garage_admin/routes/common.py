from __future__ import annotations

from fastapi import HTTPException
from fastapi.responses import Response

from garage_admin.clients.backend import BinaryPayload
from garage_admin.services.exceptions import (
    ConflictError,
    DownstreamServiceError,
    NotFoundError,
    ServiceError,
    ValidationFailed,
)


def to_http_exception(exc: ServiceError) -> HTTPException:
    if isinstance(exc, ValidationFailed):
        detail = {"message": str(exc), "field": exc.field}
        return HTTPException(status_code=400, detail=detail)
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, DownstreamServiceError) and exc.status_code and 400 <= exc.status_code < 500:
        return HTTPException(status_code=exc.status_code, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))


def binary_response(payload: BinaryPayload, fallback_name: str) -> Response:
    filename = payload.filename or fallback_name
    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
