"""Rule document loader (JSON/YAML bytes -> RuleSet).

The loader never terminates the process. Every way the rule document can be
unusable is returned as a LoadFailure value; the invocation runner decides the
exit status.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable

import yaml

from errors import DocumentFormatError, DocumentNotFoundError, DocumentReadError, SchemaValidationError
from rules.model import LoadFailure, LoadFailureReason, RuleSet
from rules.schema_validator import SchemaValidator
from storage.interfaces import LogSink, RuleSource
from utils import local_now

logger = logging.getLogger(__name__)

RULE_DOCUMENT_KIND = "RuleDocument"

_validator: SchemaValidator | None = None


def _default_validator() -> SchemaValidator:
    global _validator
    if _validator is None:
        _validator = SchemaValidator.load_from_dir()
    return _validator


def parse_document(raw: bytes, format_hint: str = "json") -> Any:
    """Decode raw bytes into a Python structure; raises DocumentFormatError."""
    if format_hint == "yaml":
        try:
            return yaml.safe_load(raw.decode("utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError) as e:
            raise DocumentFormatError(f"not valid YAML ({e.__class__.__name__})") from e
    try:
        return json.loads(raw)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors.
        raise DocumentFormatError(f"not valid JSON ({e})") from e


def build_rules(raw: bytes, *, format_hint: str = "json", validator: SchemaValidator | None = None) -> RuleSet | LoadFailure:
    """Parse and validate raw rule bytes without touching any source or sink."""
    try:
        doc = parse_document(raw, format_hint)
    except DocumentFormatError as e:
        return LoadFailure(LoadFailureReason.INVALID_FORMAT, f"Invalid configuration format: {e}")

    try:
        (validator or _default_validator()).validate(RULE_DOCUMENT_KIND, doc)
    except SchemaValidationError as e:
        return LoadFailure(LoadFailureReason.INVALID_FORMAT, f"Invalid configuration format: {e.describe()}")

    return RuleSet.from_document(doc)


def load_rules(
    source: RuleSource,
    *,
    sink: LogSink | None = None,
    clock: Callable[[], datetime] = local_now,
    validator: SchemaValidator | None = None,
) -> RuleSet | LoadFailure:
    """Read the current rule document and normalize it.

    On failure exactly one line is appended to `sink` (when given). Success is
    silent: from here on the decision engine owns the log.
    """
    try:
        raw = source.read()
    except DocumentNotFoundError:
        result: RuleSet | LoadFailure = LoadFailure(
            LoadFailureReason.MISSING_DOCUMENT, f"Missing config file: {source.location}"
        )
    except DocumentReadError as e:
        result = LoadFailure(
            LoadFailureReason.UNREADABLE_DOCUMENT, f"Unreadable config file: {source.location}: {e.reason}"
        )
    else:
        result = build_rules(raw, format_hint=source.format_hint, validator=validator)

    if isinstance(result, LoadFailure):
        logger.warning(
            "rules_load_failed",
            extra={"event": "rules_load_failed", "code": result.reason.value, "location": source.location},
        )
        if sink is not None:
            sink.append(result.message, at=clock())
    return result
