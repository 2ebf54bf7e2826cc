"""Runtime settings for the gate.

These settings say where things live (rule document, decision log, task body);
whether the task may run is decided by the rule document alone.

Rules:
- Fail closed when an explicitly requested gate.yaml is missing or invalid.
- Relative paths in gate.yaml are resolved relative to gate.yaml's directory.
- Precedence, lowest first: defaults, gate.yaml, environment, CLI overrides.
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from errors import ConfigurationError

ENV_CONFIG = "TASK_GATE_CONFIG"
ENV_RULES = "TASK_GATE_RULES"
ENV_LOG = "TASK_GATE_LOG"
ENV_LOG_LEVEL = "TASK_GATE_LOG_LEVEL"
ENV_LOGGING_CONFIG = "TASK_GATE_LOGGING_CONFIG"

DEFAULT_RULES_FILENAME = "config.json"
DEFAULT_LOG_FILENAME = "task.log"

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_TASK_KINDS = {"noop", "callable", "command"}


@dataclass(frozen=True)
class TaskSpec:
    kind: str = "noop"
    target: str | None = None
    cwd: Path | None = None

    def argv(self) -> list[str]:
        return shlex.split(self.target or "")


@dataclass(frozen=True)
class GateConfig:
    rules_path: Path
    log_path: Path
    task: TaskSpec
    log_level: str | None
    logging_config_path: Path | None


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Missing gate config file: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to parse gate config {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid YAML root object in gate config file: {path}")
    return data


def _resolve_path(base_dir: Path, raw: str) -> Path:
    p = Path(raw).expanduser()
    if p.is_absolute():
        return p
    return (base_dir / p).resolve()


def _as_dict(v: Any, label: str) -> dict[str, Any]:
    if v is None:
        return {}
    if isinstance(v, dict):
        return v
    raise ConfigurationError(f"gate config section '{label}' must be a mapping")


def _validate_level(raw: str) -> str:
    level = raw.strip().upper()
    if level not in _VALID_LEVELS:
        raise ConfigurationError(f"Invalid log level: {raw} (use one of {', '.join(sorted(_VALID_LEVELS))})")
    return level


def _task_spec(raw: dict[str, Any], base_dir: Path) -> TaskSpec:
    kind = str(raw.get("kind", "noop"))
    if kind not in _TASK_KINDS:
        raise ConfigurationError(f"Unknown task kind: {kind} (use one of {', '.join(sorted(_TASK_KINDS))})")
    target = raw.get("target")
    if kind != "noop" and not target:
        raise ConfigurationError(f"task.target is required for task kind '{kind}'")
    cwd = raw.get("cwd")
    return TaskSpec(
        kind=kind,
        target=str(target) if target else None,
        cwd=_resolve_path(base_dir, str(cwd)) if cwd else None,
    )


def default_config_dir() -> Path:
    return Path.cwd()


def load_gate_config(config_path: Path | None = None, *, env: Mapping[str, str] | None = None) -> GateConfig:
    """Build settings from defaults, optional gate.yaml and the environment."""
    env = os.environ if env is None else env

    if config_path is None and env.get(ENV_CONFIG):
        config_path = Path(env[ENV_CONFIG])

    if config_path is not None:
        config_path = config_path.expanduser()
        cfg_dir = config_path.parent.resolve()
        raw = _load_yaml(config_path)
    else:
        cfg_dir = default_config_dir().resolve()
        raw = {}

    rules_raw = _as_dict(raw.get("rules"), "rules")
    log_raw = _as_dict(raw.get("log"), "log")
    task_raw = _as_dict(raw.get("task"), "task")
    logging_raw = _as_dict(raw.get("logging"), "logging")

    rules_path = _resolve_path(cfg_dir, str(rules_raw.get("path", DEFAULT_RULES_FILENAME)))
    log_path = _resolve_path(cfg_dir, str(log_raw.get("path", DEFAULT_LOG_FILENAME)))
    log_level = logging_raw.get("level")
    logging_config = logging_raw.get("config")
    logging_config_path = _resolve_path(cfg_dir, str(logging_config)) if logging_config else None

    if env.get(ENV_RULES):
        rules_path = Path(env[ENV_RULES]).expanduser()
    if env.get(ENV_LOG):
        log_path = Path(env[ENV_LOG]).expanduser()
    if env.get(ENV_LOG_LEVEL):
        log_level = env[ENV_LOG_LEVEL]
    if env.get(ENV_LOGGING_CONFIG):
        logging_config_path = Path(env[ENV_LOGGING_CONFIG]).expanduser()

    return GateConfig(
        rules_path=rules_path,
        log_path=log_path,
        task=_task_spec(task_raw, cfg_dir),
        log_level=_validate_level(str(log_level)) if log_level is not None else None,
        logging_config_path=logging_config_path,
    )


def with_overrides(
    config: GateConfig,
    *,
    rules_path: Path | None = None,
    log_path: Path | None = None,
    log_level: str | None = None,
    task: TaskSpec | None = None,
) -> GateConfig:
    """Apply CLI flags on top of loaded settings."""
    changes: dict[str, Any] = {}
    if rules_path is not None:
        changes["rules_path"] = rules_path
    if log_path is not None:
        changes["log_path"] = log_path
    if log_level is not None:
        changes["log_level"] = _validate_level(log_level)
    if task is not None:
        changes["task"] = task
    return replace(config, **changes) if changes else config
