"""Decision engine: may the scheduled task run right now?

Checks run in a fixed order and stop at the first denial:
enabled -> day -> hour -> run

Notes:
- Day membership is an exact, case-sensitive token match ("Mon".."Sun").
- The hour window is inclusive on both ends. An inverted window
  (start_hour > end_hour) matches no hour; it is not read as wrapping midnight.
- `now` is local wall-clock time supplied by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from rules.model import RuleSet
from storage.interfaces import LogSink
from utils import weekday_token

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    RUN = "run"
    DENIED_DISABLED = "denied_disabled"
    DENIED_DAY = "denied_day"
    DENIED_HOUR = "denied_hour"

    @property
    def allows_run(self) -> bool:
        return self is Decision.RUN


@dataclass(frozen=True)
class Evaluation:
    decision: Decision
    message: str


def hour_allowed(rules: RuleSet, hour: int) -> bool:
    return rules.start_hour <= hour <= rules.end_hour


def evaluate(rules: RuleSet, now: datetime) -> Evaluation:
    """Pure evaluation; performs no I/O."""
    if not rules.enabled:
        return Evaluation(Decision.DENIED_DISABLED, "Task disabled via config")

    day = weekday_token(now)
    if day not in rules.days:
        return Evaluation(Decision.DENIED_DAY, f"Not an allowed day: {day}")

    if not hour_allowed(rules, now.hour):
        return Evaluation(Decision.DENIED_HOUR, f"Outside allowed hours: {now.hour}")

    return Evaluation(Decision.RUN, "Running main task...")


def decide(rules: RuleSet, now: datetime, sink: LogSink) -> Decision:
    """Evaluate and append exactly one decision line to the log sink."""
    result = evaluate(rules, now)
    sink.append(result.message, at=now)
    logger.info("gate_decision", extra={"event": "gate_decision", "code": result.decision.value})
    return result.decision
