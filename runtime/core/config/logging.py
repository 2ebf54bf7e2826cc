"""Diagnostic logging setup.

Decisions are written to the decision log through a LogSink. Python logging
carries diagnostics only: JSON lines on stderr by default, or whatever a
dictConfig YAML file describes.
"""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from errors import ConfigurationError
from utils import format_log_line


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        # Common structured extras (when provided).
        for k in ("event", "code", "location", "task"):
            v = getattr(record, k, None)
            if v is not None:
                base[k] = v

        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=True, sort_keys=True)


class DecisionLogFormatter(logging.Formatter):
    """Formats records like decision log lines: `[YYYY-MM-DD HH:MM:SS] message`."""

    def format(self, record: logging.LogRecord) -> str:
        line = format_log_line(record.getMessage(), datetime.fromtimestamp(record.created))
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _load_logging_config(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load logging config {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Invalid logging config YAML root object: {path}")
    return raw


def configure_logging(level: str | None = None, config_path: Path | None = None) -> None:
    """Install diagnostics on the root logger.

    With a dictConfig file the file decides handlers and levels; an explicit
    `level` still overrides the root level it sets.
    """
    if config_path is not None:
        try:
            logging.config.dictConfig(_load_logging_config(config_path))
        except (ValueError, TypeError, AttributeError, ImportError) as e:
            raise ConfigurationError(f"Invalid logging config {config_path}: {e}") from e
        if level is not None:
            logging.getLogger().setLevel(level)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter())
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level or "WARNING")
