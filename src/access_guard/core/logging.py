"""Loguru sinks for the API and the CLI.

Records go to stderr in a readable line format, except those bound with
``json_output=True`` which are serialized as JSON for log shippers. With a
log directory configured, everything is also written to
``access-guard.log`` (daily rotation, one week kept).
"""

import sys
from pathlib import Path

from loguru import logger

LOG_FILE_NAME = "access-guard.log"
_LINE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"


def _wants_json(record: dict) -> bool:
    return bool(record["extra"].get("json_output", False))


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Replace all Loguru sinks.

    Safe to call more than once; the last call wins.

    Args:
        log_level: Minimum level, any case.
        log_dir: Directory for the rotating file sink, created if missing.
    """
    level = log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_LINE_FORMAT, filter=lambda r: not _wants_json(r))
    logger.add(sys.stderr, level=level, serialize=True, filter=_wants_json)

    if not log_dir:
        return
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    logger.add(directory / LOG_FILE_NAME, level=level, format=_LINE_FORMAT, rotation="1 day", retention="7 days")
