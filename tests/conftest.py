"""Shared fixtures: in-memory collaborators and fixed local timestamps."""

from __future__ import annotations

from datetime import datetime

import pytest

from errors import DocumentNotFoundError, DocumentReadError
from storage.interfaces import LogSink, RuleSource
from utils import format_log_line

# 2026-10-21 is a Wednesday, 2026-10-24 a Saturday.
WEDNESDAY_1400 = datetime(2026, 10, 21, 14, 0, 0)
WEDNESDAY_2000 = datetime(2026, 10, 21, 20, 0, 0)
SATURDAY_1400 = datetime(2026, 10, 24, 14, 0, 0)

OFFICE_HOURS_DOC = b'{"enabled": true, "start_hour": 9, "end_hour": 17, "days": ["Mon","Tue","Wed","Thu","Fri"]}'


class MemorySource(RuleSource):
    def __init__(self, raw: bytes | None = None, *, error: str | None = None, format_hint: str = "json"):
        self._raw = raw
        self._error = error
        self._format = format_hint

    @property
    def location(self) -> str:
        return "memory://config.json"

    @property
    def format_hint(self) -> str:
        return self._format

    def read(self) -> bytes:
        if self._error is not None:
            raise DocumentReadError(self.location, self._error)
        if self._raw is None:
            raise DocumentNotFoundError(self.location)
        return self._raw


class MemorySink(LogSink):
    def __init__(self) -> None:
        self.lines: list[str] = []

    def append(self, message: str, *, at: datetime) -> None:
        self.lines.append(format_log_line(message, at))

    @property
    def messages(self) -> list[str]:
        return [line.split("] ", 1)[1] for line in self.lines]


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()
