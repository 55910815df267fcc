"""Centralized logging configuration using Loguru.

Usage:
    from annotation_index.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if ANNOTATION_INDEX_LOG_LEVEL=DEBUG

Environment Variables:
    ANNOTATION_INDEX_LOG_LEVEL: TRACE|DEBUG|INFO|WARNING|ERROR (default: WARNING)
    ANNOTATION_INDEX_LOG_JSON: 0|1 (default: 0, human-readable)
    ANNOTATION_INDEX_LOG_FILE: path to log file (optional)
"""

import json
import os
import sys

from loguru import logger

# Remove default handler
logger.remove()

# Numeric levels for NDJSON output
JSON_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 35,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_log_level = os.environ.get("ANNOTATION_INDEX_LOG_LEVEL", "WARNING").upper()
_json_mode = os.environ.get("ANNOTATION_INDEX_LOG_JSON", "0") == "1"
_log_file = os.environ.get("ANNOTATION_INDEX_LOG_FILE")


def _to_json_record(record) -> dict:
    """Flatten a loguru record into a single JSON-serializable dict."""
    payload = {
        "level": JSON_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "module": record["name"],
    }
    for key, value in record["extra"].items():
        payload[key] = value
    if record["exception"]:
        payload["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }
    return payload


def json_sink(message):
    """Write log records as NDJSON to stderr.

    CRITICAL: Never call logger.* inside a sink - causes infinite recursion
    """
    sys.stderr.write(json.dumps(_to_json_record(message.record), default=str) + "\n")
    sys.stderr.flush()


_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")

if _json_mode:
    logger.add(json_sink, level=_log_level, colorize=False)
else:
    logger.add(
        sys.stderr,
        level=_log_level,
        format=_human_format,
        colorize=None,  # Auto-detect: colors if TTY, plain if piped
    )

if _log_file:

    def _file_json_sink(message):
        """Append NDJSON records to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(_to_json_record(message.record), default=str) + "\n")

    logger.add(_file_json_sink, level="TRACE")


def set_level(level: str) -> int:
    """Replace every handler with a stderr handler at the given level.

    Returns the new handler id. Useful for callers that embed the indexer
    and want more (or less) output than the environment asks for.
    """
    global _log_level

    _log_level = level.upper()
    logger.remove()
    if _json_mode:
        return logger.add(json_sink, level=_log_level, colorize=False)
    return logger.add(sys.stderr, level=_log_level, format=_human_format, colorize=None)


__all__ = [
    "logger",
    "set_level",
]
