"""Storage interfaces the gate consumes.

The gate keeps no state between invocations. These interfaces define the only
durable boundaries it touches:
- the rule document (read once per invocation)
- the decision log (append-only)

Concrete file-backed drivers live in `storage/files.py`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class RuleSource(ABC):
    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable location used in log messages."""

    @property
    def format_hint(self) -> str:
        """Document format: "json" or "yaml"."""
        return "json"

    @abstractmethod
    def read(self) -> bytes:
        """Return the raw document.

        Must raise DocumentNotFoundError when absent and DocumentReadError on
        any other I/O failure.
        """


class LogSink(ABC):
    @abstractmethod
    def append(self, message: str, *, at: datetime) -> None:
        """Append one `[YYYY-MM-DD HH:MM:SS] message` line (append-only).

        Must raise LogWriteError when the line cannot be written.
        """
