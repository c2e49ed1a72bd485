from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import FileResponse
from starlette.types import ASGIApp


class StaticFilesMiddleware(BaseHTTPMiddleware):
    """Serve files from ``directory`` ahead of the resource routes.

    ``/`` maps to ``index.html``. Requests that do not name an existing file
    fall through to the router.
    """

    def __init__(self, app: ASGIApp, directory: str) -> None:
        super().__init__(app)
        self._root = Path(directory).resolve()

    def _lookup(self, path: str) -> Optional[Path]:
        relative = path.lstrip("/") or "index.html"
        try:
            candidate = (self._root / relative).resolve()
            if candidate.is_dir():
                candidate = candidate / "index.html"
            if not candidate.is_relative_to(self._root):
                return None
            return candidate if candidate.is_file() else None
        except (OSError, ValueError):
            # NUL bytes and over-long names are not files; let the router answer
            return None

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        if request.method in ("GET", "HEAD") and self._root.is_dir():
            file_path = self._lookup(request.url.path)
            if file_path is not None:
                return FileResponse(file_path)
        return await call_next(request)
