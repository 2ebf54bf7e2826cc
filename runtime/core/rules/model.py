"""Rule values produced by the loader.

A RuleSet is built fresh on every invocation and never mutated. A LoadFailure
is the value returned in its place when the rule document cannot be used.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_START_HOUR = 0
DEFAULT_END_HOUR = 23
DEFAULT_DAYS: frozenset[str] = frozenset({"Mon", "Tue", "Wed", "Thu", "Fri"})


@dataclass(frozen=True)
class RuleSet:
    enabled: bool
    start_hour: int = DEFAULT_START_HOUR
    end_hour: int = DEFAULT_END_HOUR
    days: frozenset[str] = field(default=DEFAULT_DAYS)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "RuleSet":
        """Normalize a validated rule document; absent or null keys take their defaults independently."""
        start_hour = doc.get("start_hour")
        end_hour = doc.get("end_hour")
        days = doc.get("days")
        return cls(
            enabled=bool(doc["enabled"]),
            start_hour=DEFAULT_START_HOUR if start_hour is None else int(start_hour),
            end_hour=DEFAULT_END_HOUR if end_hour is None else int(end_hour),
            days=DEFAULT_DAYS if days is None else frozenset(map(str, days)),
        )


class LoadFailureReason(str, Enum):
    MISSING_DOCUMENT = "missing_document"
    UNREADABLE_DOCUMENT = "unreadable_document"
    INVALID_FORMAT = "invalid_format"


@dataclass(frozen=True)
class LoadFailure:
    reason: LoadFailureReason
    message: str
