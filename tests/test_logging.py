from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from user_api.app.core.config import Settings
from user_api.app.core.logging_config import (
    DRIVER_LOGGER,
    log_level,
    log_requests,
    request_logging_enabled,
    setup_logging,
)


@pytest.fixture()
def bare_root_logger():
    """Root logger with no handlers; the previous state is restored afterwards."""
    root = logging.getLogger()
    driver = logging.getLogger(DRIVER_LOGGER)
    saved = (root.handlers[:], root.level, driver.level)
    root.handlers = []
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers, level, driver_level = saved
    root.setLevel(level)
    driver.setLevel(driver_level)


@pytest.mark.parametrize(
    "name, expected",
    [("debug", logging.DEBUG), (" Warning ", logging.WARNING), ("verbose", logging.INFO)],
)
def test_log_level_names(name: str, expected: int) -> None:
    assert log_level(name) == expected


def test_setup_logging_writes_to_log_file(bare_root_logger, tmp_path) -> None:
    logfile = tmp_path / "api.log"
    assert setup_logging(Settings(log_level="debug", log_file=str(logfile)))

    assert bare_root_logger.level == logging.DEBUG
    assert len(bare_root_logger.handlers) == 2
    assert logging.getLogger(DRIVER_LOGGER).level == logging.INFO

    logging.getLogger("user_api.app.services").warning("store unavailable")
    assert "[WARNING] user_api.app.services: store unavailable" in logfile.read_text(encoding="utf-8")


def test_setup_logging_keeps_existing_configuration(bare_root_logger) -> None:
    assert setup_logging(Settings(log_level="warning"))
    assert not setup_logging(Settings(log_level="debug"))
    assert bare_root_logger.level == logging.WARNING
    assert len(bare_root_logger.handlers) == 1


def test_request_logging_only_in_development() -> None:
    assert request_logging_enabled(Settings(environment="development"))
    assert not request_logging_enabled(Settings(environment="production"))
    assert not request_logging_enabled(Settings(environment="test"))


def test_log_requests_writes_one_line_per_request(caplog) -> None:
    app = FastAPI()
    app.middleware("http")(log_requests)

    @app.get("/ping")
    async def ping() -> dict:
        return {"ok": True}

    with caplog.at_level(logging.INFO, logger="user_api.requests"):
        TestClient(app).get("/ping")

    (record,) = [r for r in caplog.records if r.name == "user_api.requests"]
    assert record.getMessage().startswith("GET /ping -> 200 (")
