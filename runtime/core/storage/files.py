"""File-backed storage drivers (default deployment).

The rule document is a plain file edited by operators. The decision log is a
flat text file shared by every invocation, including overlapping ones:
- opened with O_APPEND so each write lands at the current end of file
- each line is written with a single os.write call so lines never interleave
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

from errors import DocumentNotFoundError, DocumentReadError, LogWriteError
from storage.interfaces import LogSink, RuleSource
from utils import format_log_line

_YAML_SUFFIXES = (".yaml", ".yml")


class FileRuleSource(RuleSource):
    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def location(self) -> str:
        return str(self._path)

    @property
    def format_hint(self) -> str:
        return "yaml" if self._path.suffix.lower() in _YAML_SUFFIXES else "json"

    def read(self) -> bytes:
        try:
            return self._path.read_bytes()
        except FileNotFoundError as e:
            raise DocumentNotFoundError(self.location) from e
        except OSError as e:
            raise DocumentReadError(self.location, e.strerror or str(e)) from e


class FileLogSink(LogSink):
    def __init__(self, path: Path):
        self._path = Path(path)

    def append(self, message: str, *, at: datetime) -> None:
        line = (format_log_line(message, at) + os.linesep).encode("utf-8")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o644)
            try:
                os.write(fd, line)
            finally:
                os.close(fd)
        except OSError as e:
            raise LogWriteError(str(self._path), e.strerror or str(e)) from e
