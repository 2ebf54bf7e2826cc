"""Task body collaborators invoked only on a RUN decision.

A task body never raises to the gate: failures come back as a TaskResult so
the runner has a single place that logs them and picks the exit status.
"""

from __future__ import annotations

import importlib
import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from config.settings import TaskSpec
from errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskResult:
    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> "TaskResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "TaskResult":
        return cls(ok=False, error=error)


class TaskBody(ABC):
    @abstractmethod
    def run(self) -> TaskResult:
        """Execute the deployer's task. Must not raise."""


class NoopTask(TaskBody):
    """Placeholder body for deployments that only want the decision log."""

    def run(self) -> TaskResult:
        return TaskResult.success()


def _split_target(target: str) -> tuple[str, str]:
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(f"Task callable must look like 'package.module:function' (got {target!r})")
    return module_name, attr_path


def resolve_callable(target: str) -> Callable[[], Any]:
    """Resolve "package.module:function" to a callable."""
    module_name, attr_path = _split_target(target)
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import task module {module_name!r}: {e}") from e
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigurationError(f"Task callable not found: {target}") from e
    if not callable(obj):
        raise ConfigurationError(f"Task target is not callable: {target}")
    return obj


class CallableTask(TaskBody):
    """Calls a python function.

    A "package.module:function" target is imported only when the task runs, so
    a broken deployer module cannot affect deny outcomes. Import errors, raised
    exceptions and a non-zero `sys.exit()` all come back as failures.
    """

    def __init__(self, func: Callable[[], Any] | None = None, *, target: str | None = None, name: str | None = None):
        if func is None and target is None:
            raise ConfigurationError("CallableTask needs a function or a target")
        if target is not None:
            _split_target(target)
        self._func = func
        self._target = target
        self.name = name or target or getattr(func, "__qualname__", repr(func))

    @classmethod
    def from_target(cls, target: str) -> "CallableTask":
        return cls(target=target)

    def run(self) -> TaskResult:
        try:
            func = self._func if self._func is not None else resolve_callable(self._target or "")
            func()
        except SystemExit as e:
            if e.code is None or e.code == 0:
                return TaskResult.success()
            logger.error("task_exited", extra={"event": "task_exited", "task": self.name, "code": str(e.code)})
            return TaskResult.failure(f"{self.name} exited with status {e.code}")
        except Exception as e:
            logger.exception("task_failed", extra={"event": "task_failed", "task": self.name})
            return TaskResult.failure(str(e) or e.__class__.__name__)
        return TaskResult.success()


class CommandTask(TaskBody):
    def __init__(self, argv: Sequence[str], *, cwd: str | None = None):
        if not argv:
            raise ConfigurationError("Task command must not be empty")
        self.argv = list(argv)
        self._cwd = cwd

    def run(self) -> TaskResult:
        try:
            proc = subprocess.run(self.argv, cwd=self._cwd, check=False)
        except OSError as e:
            return TaskResult.failure(f"cannot start {self.argv[0]}: {e.strerror or e}")
        if proc.returncode != 0:
            return TaskResult.failure(f"{self.argv[0]} exited with status {proc.returncode}")
        return TaskResult.success()


def task_from_spec(spec: TaskSpec) -> TaskBody:
    if spec.kind == "callable":
        return CallableTask.from_target(spec.target or "")
    if spec.kind == "command":
        return CommandTask(spec.argv(), cwd=str(spec.cwd) if spec.cwd else None)
    return NoopTask()
