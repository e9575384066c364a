"""Logging configuration for the fitmerge command line tools."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping as ABCMapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

__all__ = ["JsonFormatter", "setup_logging"]

_ROOT_LOGGER = "fitmerge"
_HANDLER_MARKER = "_fitmerge_handler"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, sort_keys=False)


def _resolve_level(value: Any) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        level = logging.getLevelName(value.strip().upper())
        if isinstance(level, int):
            return level
    return logging.INFO


def _build_handler(output: str) -> logging.Handler:
    target = output.strip()
    lowered = target.lower()
    if lowered == "stdout":
        return logging.StreamHandler(sys.stdout)
    if lowered in {"", "stderr"}:
        return logging.StreamHandler(sys.stderr)
    path = Path(target).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def setup_logging(config: Optional[Mapping[str, Any]] = None) -> logging.Logger:
    """Configure the ``fitmerge`` logger from the ``[logging]`` table of ``config``.

    Recognised keys are ``level`` (name or number), ``output`` (``stdout``,
    ``stderr`` or a file path) and ``format`` (``json`` or ``text``). Calling
    the function again replaces the handler installed by the previous call.
    """

    section: Mapping[str, Any] = {}
    if config:
        candidate = config.get("logging", {})
        if isinstance(candidate, ABCMapping):
            section = candidate

    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    handler = _build_handler(str(section.get("output", "stderr")))
    setattr(handler, _HANDLER_MARKER, True)
    if str(section.get("format", "json")).lower() == "text":
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler.setFormatter(JsonFormatter())

    logger.addHandler(handler)
    logger.setLevel(_resolve_level(section.get("level", "info")))
    logger.propagate = False
    return logger
