"""
Main entrypoint for the User Records API.

This module assembles the FastAPI application: logging, CORS, the
development request logger, the ``/api`` routes, the error handlers,
and the record store's startup and shutdown hooks.  ``create_app``
builds and configures the app, which is then instantiated at module
import time as ``app``, e.g.::

    uvicorn user_api.app.main:app --reload
"""

from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.router import router as api_router
from .core.config import settings
from .core.db import close_db, init_db
from .core.errors import register_exception_handlers
from .core.logging_config import log_requests, request_logging_enabled, setup_logging


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.  The database is
        not contacted until the startup event fires.
    """
    # Initialise logging before anything else so that the startup hooks
    # can log.
    setup_logging(settings)

    app = FastAPI(title=settings.project_name, version=settings.api_version)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if request_logging_enabled(settings):
        app.middleware("http")(log_requests)

    app.include_router(api_router, prefix="/api")
    register_exception_handlers(app)

    @app.get("/", tags=["root"])
    async def welcome() -> Dict[str, Any]:
        return {
            "success": True,
            "message": "Welcome to the User Records API",
            "version": settings.api_version,
            "endpoints": {"health": "/api/health", "users": "/api/users", "documentation": "/docs"},
        }

    # A failing init_db aborts startup, so the server never runs without
    # a reachable database.
    @app.on_event("startup")
    async def startup_event() -> None:
        init_db()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        close_db()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
