"""Unit tests for logging configuration."""

from pathlib import Path

from loguru import logger

from access_guard.core.logging import setup_logging


class TestLogging:
    """Tests for Loguru logging setup."""

    def test_setup_logging_does_not_raise(self) -> None:
        setup_logging("DEBUG")
        setup_logging("INFO")
        setup_logging("WARNING")

    def test_setup_logging_case_insensitive(self) -> None:
        setup_logging("info")
        setup_logging("debug")

    def test_file_sink_created(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "logs"
        setup_logging("INFO", log_dir=str(log_dir))
        logger.info("written to file")
        logger.complete()

        assert (log_dir / "access-guard.log").exists()
        assert "written to file" in (log_dir / "access-guard.log").read_text()
        setup_logging("INFO")
