"""
Logging for the User Records API.

All modules log through ``logging.getLogger(__name__)`` into the root
logger, which ``setup_logging`` configures once from ``Settings``:
a console handler, a file handler when ``LOG_FILE`` is set, and the
MongoDB driver held back to INFO or above.  ``log_requests`` is the
HTTP middleware that writes one line per request; it is only
installed when ``request_logging_enabled`` says so.
"""

import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from fastapi import Request
from starlette.responses import Response

from .config import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# At DEBUG the driver logs every heartbeat and topology change.
DRIVER_LOGGER = "pymongo"

request_logger = logging.getLogger("user_api.requests")


def log_level(name: str) -> int:
    """Return the numeric level for ``name``; unknown names mean INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def request_logging_enabled(config: Settings) -> bool:
    return config.environment == "development"


def build_handlers(logfile: Optional[str]) -> List[logging.Handler]:
    """Console handler, plus a UTF-8 file handler when ``logfile`` is set."""
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(config: Settings) -> bool:
    """Configure the root logger from ``config``.

    Returns ``False`` and changes nothing when the root logger already
    has handlers (pytest, or a second call to ``create_app``).
    """
    root = logging.getLogger()
    if root.handlers:
        return False

    level = log_level(config.log_level)
    root.setLevel(level)
    for handler in build_handlers(config.log_file or None):
        root.addHandler(handler)
    logging.getLogger(DRIVER_LOGGER).setLevel(max(level, logging.INFO))
    return True


async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Log ``METHOD path -> status (elapsed ms)`` for every request."""
    started = time.perf_counter()
    response = await call_next(request)
    request_logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response
