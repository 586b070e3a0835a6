# src/logging/logger.py - v1
"""Logger factory with JSON and text formatters.

Library modules log through ``logging.getLogger(__name__)``, which places
them under the ``enpensent`` logger configured here.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from enpensent.logging.context import get_context

ROOT_LOGGER = "enpensent"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with request context attached."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context

        data = getattr(record, "data", None)
        if data:
            entry["data"] = data

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        parts = [
            datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
        ]
        if ctx.domain:
            parts.append(f"[{ctx.domain}]")
        if ctx.request_id:
            parts.append(f"({ctx.request_id})")
        parts.append(f"- {record.getMessage()}")
        text = " ".join(parts)
        if record.exc_info and record.exc_info[1] is not None:
            text += "\n" + self.formatException(record.exc_info)
        return text


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the enpensent namespace."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> logging.Logger:
    """Configure the root enpensent logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: Output format ("json" or "text").
        log_file: Path to log file (None = stderr only).
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.

    Returns:
        The configured root logger.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    # stderr keeps stdout free for CLI JSON output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        from enpensent.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(log_file, rotation=rotation, retention=retention)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger
