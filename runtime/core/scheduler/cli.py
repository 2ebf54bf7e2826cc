"""Command-line entry point for the gate.

Typical crontab line:

    * * * * * task-gate --config /srv/report/gate.yaml run

Exit codes:
  0  evaluation completed (any deny, or a successful run)
  1  rules could not be loaded, the task body failed, settings are invalid,
     or the decision log cannot be written
  2  invalid arguments
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import Sequence

from config.logging import configure_logging
from config.settings import GateConfig, TaskSpec, load_gate_config, with_overrides
from errors import ConfigurationError, LogWriteError
from gate.engine import evaluate
from gate.task import task_from_spec
from rules.loader import load_rules
from rules.model import LoadFailure
from scheduler.runner import EXIT_FAILURE, EXIT_OK, GateRunner
from storage.files import FileLogSink, FileRuleSource
from utils import local_now, order_weekdays, parse_local_datetime


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="task-gate",
        description="Decide whether a scheduled task may run now, and run it if so.",
    )
    parser.add_argument("--config", type=Path, help="gate settings YAML (default: $TASK_GATE_CONFIG)")
    parser.add_argument("--rules", type=Path, help="rule document (JSON or YAML)")
    parser.add_argument("--log", type=Path, help="decision log file")
    parser.add_argument("--log-level", help="diagnostic log level on stderr")
    task_group = parser.add_mutually_exclusive_group()
    task_group.add_argument("--task-callable", metavar="MODULE:FUNC", help="python callable to run on RUN")
    task_group.add_argument("--task-command", metavar="CMD", help="shell-style command line to run on RUN")

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("run", help="load rules, decide, run the task when allowed (default)")
    check = sub.add_parser("check", help="print the decision without logging or running the task")
    check.add_argument("--at", help='evaluate at a local time, e.g. "2026-10-21 14:00"')
    sub.add_parser("validate", help="load the rule document and print the normalized rules")
    return parser


def _resolve_config(args: argparse.Namespace) -> GateConfig:
    task = None
    if args.task_callable:
        task = TaskSpec(kind="callable", target=args.task_callable)
    elif args.task_command:
        task = TaskSpec(kind="command", target=args.task_command)
    config = load_gate_config(args.config)
    return with_overrides(config, rules_path=args.rules, log_path=args.log, log_level=args.log_level, task=task)


def _cmd_run(config: GateConfig) -> int:
    runner = GateRunner(
        source=FileRuleSource(config.rules_path),
        sink=FileLogSink(config.log_path),
        task=task_from_spec(config.task),
    )
    return runner.run_once().exit_code


def _cmd_check(config: GateConfig, at: datetime | None) -> int:
    rules = load_rules(FileRuleSource(config.rules_path))
    if isinstance(rules, LoadFailure):
        print(rules.message, file=sys.stderr)
        return EXIT_FAILURE
    result = evaluate(rules, at or local_now())
    print(f"{result.decision.value}: {result.message}")
    return EXIT_OK


def _cmd_validate(config: GateConfig) -> int:
    rules = load_rules(FileRuleSource(config.rules_path))
    if isinstance(rules, LoadFailure):
        print(rules.message, file=sys.stderr)
        return EXIT_FAILURE
    print(f"rules={config.rules_path}")
    print(f"enabled={str(rules.enabled).lower()}")
    print(f"start_hour={rules.start_hour}")
    print(f"end_hour={rules.end_hour}")
    print(f"days={','.join(order_weekdays(rules.days))}")
    if rules.start_hour > rules.end_hour:
        print("warning=start_hour is after end_hour; every hour will be denied")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    command = args.command or "run"

    at = None
    if getattr(args, "at", None):
        try:
            at = parse_local_datetime(args.at)
        except ValueError as e:
            parser.error(f"invalid --at value: {e}")

    try:
        config = _resolve_config(args)
        configure_logging(config.log_level, config.logging_config_path)
        if command == "check":
            return _cmd_check(config, at)
        if command == "validate":
            return _cmd_validate(config)
        return _cmd_run(config)
    except (ConfigurationError, LogWriteError) as e:
        print(f"task-gate: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
