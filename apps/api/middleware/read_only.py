from __future__ import annotations

import logging
from typing import Iterable

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


class ReadOnlyMiddleware(BaseHTTPMiddleware):
    """Reject writes while still letting ``exempt_paths`` through."""

    def __init__(self, app: ASGIApp, exempt_paths: Iterable[str] = ()) -> None:
        super().__init__(app)
        self._exempt_paths = frozenset(exempt_paths)

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        if request.method in SAFE_METHODS or request.url.path in self._exempt_paths:
            return await call_next(request)
        logger.warning("Write rejected in read-only mode", extra={"method": request.method, "path": request.url.path})
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": "Server is running in read-only mode"})
