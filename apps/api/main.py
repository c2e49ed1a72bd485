from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from apps.api.middleware import (
    LoggingMiddleware,
    NoCacheMiddleware,
    ReadOnlyMiddleware,
    StaticFilesMiddleware,
    register_exception_handlers,
)
from apps.api.routers import resources_router, token_router
from apps.api.routers.token import TOKEN_PATH
from core.config import Settings, get_settings
from core.logging import configure_logging, log_event
from core.storage.fixture_store import FixtureStore

logger = logging.getLogger(__name__)


def create_app(app_settings: Optional[Settings] = None, store: Optional[FixtureStore] = None) -> FastAPI:
    """Build a mock server around ``store``, loading the configured fixture file when none is given.

    The token route is included before the generic resource routes so its
    exact path always wins.
    """
    app_settings = app_settings or get_settings()
    configure_logging(app_settings.log_level)
    if store is None:
        store = FixtureStore.from_file(
            app_settings.fixture_path,
            id_field=app_settings.id_field,
            foreign_key_suffix=app_settings.foreign_key_suffix,
        )

    app = FastAPI(title="Marketplace Mock Server", version="0.1.0", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = app_settings
    app.state.store = store

    register_exception_handlers(app)

    app.include_router(token_router)
    app.include_router(resources_router)

    # Starlette wraps in reverse order: the last middleware added runs first.
    app.add_middleware(StaticFilesMiddleware, directory=app_settings.static_dir)
    if app_settings.read_only:
        app.add_middleware(ReadOnlyMiddleware, exempt_paths=[TOKEN_PATH])
    if not app_settings.no_cache:
        app.add_middleware(NoCacheMiddleware)
    if not app_settings.no_gzip:
        app.add_middleware(GZipMiddleware)
    app.add_middleware(LoggingMiddleware)
    if not app_settings.no_cors and app_settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Total-Count", "Link", "X-Request-ID"],
        )

    log_event(logger, "app.created", resources=store.resource_names(), read_only=app_settings.read_only)
    return app
