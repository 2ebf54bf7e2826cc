"""One gate invocation, start to finish.

The external scheduler (cron, a systemd timer) starts the gate once per tick:
- load the current rule document
- decide against the local clock
- run the task body only on RUN

This is the single place that maps outcomes to exit codes. Overlapping
invocations are not locked against each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from gate.engine import Decision, decide
from gate.task import TaskBody, TaskResult
from rules.loader import load_rules
from rules.model import LoadFailure
from storage.interfaces import LogSink, RuleSource
from utils import local_now

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class InvocationResult:
    exit_code: int
    decision: Decision | None = None
    failure: LoadFailure | None = None
    task_error: str | None = None


@dataclass(frozen=True)
class GateRunner:
    source: RuleSource
    sink: LogSink
    task: TaskBody
    clock: Callable[[], datetime] = field(default=local_now)

    def run_once(self) -> InvocationResult:
        rules = load_rules(self.source, sink=self.sink, clock=self.clock)
        if isinstance(rules, LoadFailure):
            return InvocationResult(exit_code=EXIT_FAILURE, failure=rules)

        decision = decide(rules, self.clock(), self.sink)
        if not decision.allows_run:
            return InvocationResult(exit_code=EXIT_OK, decision=decision)

        try:
            result = self.task.run()
        except SystemExit as e:
            logger.error("task_exited", extra={"event": "task_exited", "code": str(e.code)})
            result = TaskResult.failure(f"task body exited with status {e.code}")
        except Exception as e:
            logger.exception("task_raised", extra={"event": "task_raised"})
            result = TaskResult.failure(str(e) or e.__class__.__name__)

        if not result.ok:
            self.sink.append(f"Main task failed: {result.error}", at=self.clock())
            logger.error("task_failed", extra={"event": "task_failed"})
            return InvocationResult(exit_code=EXIT_FAILURE, decision=decision, task_error=result.error)

        self.sink.append("Main task completed", at=self.clock())
        logger.info("task_completed", extra={"event": "task_completed"})
        return InvocationResult(exit_code=EXIT_OK, decision=decision)
