"""Core gate error types.

The gate is fail-closed: when it cannot load its own settings or rules it
refuses to decide. These exception types are raised by collaborators and
converted into failure values or exit codes at the invocation boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class TaskGateError(Exception):
    """Base class for gate errors."""


@dataclass(frozen=True)
class SchemaViolation:
    path: str
    message: str


class SchemaValidationError(TaskGateError):
    def __init__(self, kind: str, violations: Iterable[SchemaViolation]):
        self.kind = kind
        self.violations = list(violations)
        super().__init__(f"{kind} failed schema validation ({len(self.violations)} violation(s))")

    def describe(self) -> str:
        return "; ".join(f"{v.path}: {v.message}" for v in self.violations)


class DocumentNotFoundError(TaskGateError):
    def __init__(self, location: str):
        self.location = location
        super().__init__(f"Document not found: {location}")


class DocumentReadError(TaskGateError):
    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Cannot read document {location}: {reason}")


class ConfigurationError(TaskGateError):
    """Invalid or missing gate runtime settings (not the rule document)."""


class DocumentFormatError(TaskGateError):
    """Raw document bytes could not be decoded into a structure."""


class LogWriteError(TaskGateError):
    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"cannot write decision log {location}: {reason}")
