"""Entry point for the User Records API.

Starts the API under Uvicorn.  Host and port come from the ``HOST`` and
``PORT`` environment variables (see ``user_api.app.core.config``).
If the database cannot be reached at startup the server exits with a
non‑zero status.

Usage:
    python run.py
"""
import asyncio

from uvicorn import Config, Server

from user_api.app.core.config import settings
from user_api.app.core.logging_config import log_level
from user_api.app.main import app

STARTUP_FAILURE = 3


async def run_api() -> None:
    """Serve the API until interrupted."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=log_level(settings.log_level),
    )
    server = Server(config)
    await server.serve()
    if not server.started:
        # Startup hooks failed (e.g. MongoDB unreachable).
        raise SystemExit(STARTUP_FAILURE)


if __name__ == "__main__":
    asyncio.run(run_api())
