from __future__ import annotations

import logging

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import DuplicateIdError, InvalidPayloadError, InvalidQueryError, ResourceNotFoundError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    logger.warning("Request error", extra={"status": status_code, "detail": str(exc)})
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ResourceNotFoundError)
    async def not_found_handler(request, exc: ResourceNotFoundError):  # type: ignore[override]
        return _error_response(status.HTTP_404_NOT_FOUND, exc)

    @app.exception_handler(DuplicateIdError)
    async def duplicate_id_handler(request, exc: DuplicateIdError):  # type: ignore[override]
        return _error_response(status.HTTP_409_CONFLICT, exc)

    @app.exception_handler(InvalidPayloadError)
    async def invalid_payload_handler(request, exc: InvalidPayloadError):  # type: ignore[override]
        return _error_response(status.HTTP_400_BAD_REQUEST, exc)

    @app.exception_handler(InvalidQueryError)
    async def invalid_query_handler(request, exc: InvalidQueryError):  # type: ignore[override]
        return _error_response(status.HTTP_400_BAD_REQUEST, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc: StarletteHTTPException):  # type: ignore[override]
        logger.warning("HTTP error", extra={"status": exc.status_code, "detail": exc.detail})
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request, exc: Exception):  # type: ignore[override]
        logger.exception("Unhandled server error")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
