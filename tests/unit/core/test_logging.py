"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from structlog.testing import capture_logs

from encounter_forge.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    remove_handlers,
    request_context,
)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore structlog and context defaults after each test."""
    yield
    clear_context()
    remove_handlers()
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_stdlib_level(self) -> None:
        """Test the root logger level follows the requested level."""
        configure_logging(level="WARNING", json_format=True)

        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_unknown_level_defaults_to_info(self) -> None:
        """Test an unknown level name falls back to INFO."""
        configure_logging(level="chatty")

        assert logging.getLogger().level == logging.INFO

    def test_log_file_handler(self, tmp_path: Path) -> None:
        """Test a file handler is attached when a path is given."""
        path = tmp_path / "forge.log"

        configure_logging(level="DEBUG", log_file=str(path))

        handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        assert any(h.baseFilename == str(path) for h in handlers)

    def test_log_file_is_json(self, tmp_path: Path) -> None:
        """Test structlog and third-party records both land in the file as JSON."""
        path = tmp_path / "forge.log"
        configure_logging(level="INFO", log_file=str(path))

        get_logger("encounter_forge.engine").info("Encounter generated", adjusted_xp=450)
        logging.getLogger("urllib3").warning("Retrying connection")
        remove_handlers()

        entries = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
        assert [entry["event"] for entry in entries] == ["Encounter generated", "Retrying connection"]
        assert entries[0]["adjusted_xp"] == 450
        assert entries[0]["logger"] == "encounter_forge.engine"
        assert entries[1]["logger"] == "urllib3"
        assert all(entry["app"] == "encounter_forge" for entry in entries)

    def test_reconfigure_replaces_handlers(self) -> None:
        """Test configuring twice leaves a single stderr handler of ours."""
        configure_logging()
        configure_logging()

        ours = [h for h in logging.getLogger().handlers if h.get_name() == "encounter_forge"]
        assert len(ours) == 1


class TestContext:
    """Tests for context binding."""

    def test_bind_and_clear(self) -> None:
        """Test bound values are visible until cleared."""
        bind_context(command="encounter", request_id="abc")

        assert structlog.contextvars.get_contextvars() == {"command": "encounter", "request_id": "abc"}

        clear_context()

        assert structlog.contextvars.get_contextvars() == {}

    def test_get_logger_logs(self) -> None:
        """Test module loggers emit structured events."""
        with capture_logs() as captured:
            get_logger("encounter_forge.test").info("Encounter generated", adjusted_xp=450)

        assert captured == [{"event": "Encounter generated", "adjusted_xp": 450, "log_level": "info"}]

    def test_request_context(self) -> None:
        """Test a request id and the given values are bound only inside the block."""
        bind_context(environment="Forest")

        with request_context(command="treasure") as request_id:
            bound = structlog.contextvars.get_contextvars()

        assert bound == {"environment": "Forest", "command": "treasure", "request_id": request_id}
        assert len(request_id) == 8
        assert structlog.contextvars.get_contextvars() == {"environment": "Forest"}
