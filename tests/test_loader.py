"""Rule document loading: defaults, failure values and failure log lines."""

from __future__ import annotations

import pytest

from conftest import OFFICE_HOURS_DOC, WEDNESDAY_1400, MemorySource
from gate.engine import evaluate
from rules.loader import build_rules, load_rules
from rules.model import DEFAULT_DAYS, LoadFailure, LoadFailureReason, RuleSet


def _clock():
    return WEDNESDAY_1400


def test_full_document():
    rules = build_rules(OFFICE_HOURS_DOC)
    assert rules == RuleSet(enabled=True, start_hour=9, end_hour=17, days=frozenset({"Mon", "Tue", "Wed", "Thu", "Fri"}))


def test_enabled_only_gets_defaults():
    rules = build_rules(b'{"enabled": true}')
    assert rules == RuleSet(enabled=True, start_hour=0, end_hour=23, days=DEFAULT_DAYS)
    assert rules.days == frozenset({"Mon", "Tue", "Wed", "Thu", "Fri"})


def test_defaults_behave_like_explicit_values():
    implicit = build_rules(b'{"enabled": true}')
    explicit = build_rules(b'{"enabled": true, "start_hour": 0, "end_hour": 23, "days": ["Mon","Tue","Wed","Thu","Fri"]}')
    for hour in range(24):
        now = WEDNESDAY_1400.replace(hour=hour)
        assert evaluate(implicit, now) == evaluate(explicit, now)


def test_hours_defaulted_independently():
    rules = build_rules(b'{"enabled": true, "start_hour": 20}')
    assert (rules.start_hour, rules.end_hour) == (20, 23)


def test_inverted_range_is_accepted():
    rules = build_rules(b'{"enabled": true, "start_hour": 17, "end_hour": 9}')
    assert isinstance(rules, RuleSet)


def test_unknown_keys_and_tokens_are_tolerated():
    rules = build_rules(b'{"enabled": false, "days": ["Mon", "Holiday"], "note": "paused for audit"}')
    assert rules.enabled is False
    assert rules.days == frozenset({"Mon", "Holiday"})


def test_empty_days_list_is_kept():
    assert build_rules(b'{"enabled": true, "days": []}').days == frozenset()


def test_yaml_document():
    raw = b"enabled: true\nstart_hour: 6\ndays: [Sat, Sun]\n"
    rules = build_rules(raw, format_hint="yaml")
    assert rules == RuleSet(enabled=True, start_hour=6, end_hour=23, days=frozenset({"Sat", "Sun"}))


@pytest.mark.parametrize(
    "raw",
    [
        b'{"foo": 1}',
        b"{not json",
        b"",
        b"\xff\xfe\x00garbage",
        b"[true]",
        b"null",
        b'{"enabled": "yes"}',
        b'{"enabled": 1}',
        b'{"enabled": null}',
        b'{"enabled": true, "start_hour": "9"}',
        b'{"enabled": true, "end_hour": true}',
        b'{"enabled": true, "days": "Mon"}',
        b'{"enabled": true, "days": [1, 2]}',
    ],
)
def test_invalid_format(raw):
    result = build_rules(raw)
    assert isinstance(result, LoadFailure)
    assert result.reason is LoadFailureReason.INVALID_FORMAT
    assert result.message.startswith("Invalid configuration format")


def test_invalid_yaml():
    result = build_rules(b"enabled: [unclosed\n", format_hint="yaml")
    assert result.reason is LoadFailureReason.INVALID_FORMAT


def test_violations_are_reported_with_paths():
    result = build_rules(b'{"enabled": true, "start_hour": "9", "days": ["Mon", 2]}')
    assert "/days/1" in result.message
    assert "/start_hour" in result.message
    assert result.message.index("/days/1") < result.message.index("/start_hour")


class TestLoadRules:
    def test_success_is_silent(self, sink):
        rules = load_rules(MemorySource(OFFICE_HOURS_DOC), sink=sink, clock=_clock)
        assert isinstance(rules, RuleSet)
        assert sink.lines == []

    def test_missing_document(self, sink):
        result = load_rules(MemorySource(None), sink=sink, clock=_clock)
        assert result.reason is LoadFailureReason.MISSING_DOCUMENT
        assert sink.lines == ["[2026-10-21 14:00:00] Missing config file: memory://config.json"]

    def test_unreadable_document(self, sink):
        result = load_rules(MemorySource(error="Permission denied"), sink=sink, clock=_clock)
        assert result.reason is LoadFailureReason.UNREADABLE_DOCUMENT
        assert sink.messages == ["Unreadable config file: memory://config.json: Permission denied"]

    def test_invalid_document_logs_once(self, sink):
        result = load_rules(MemorySource(b'{"foo": 1}'), sink=sink, clock=_clock)
        assert result.reason is LoadFailureReason.INVALID_FORMAT
        assert len(sink.lines) == 1
        assert sink.messages[0].startswith("Invalid configuration format: /: 'enabled' is a required property")

    def test_without_sink(self):
        result = load_rules(MemorySource(None))
        assert isinstance(result, LoadFailure)

    def test_uses_source_format(self):
        rules = load_rules(MemorySource(b"enabled: false\n", format_hint="yaml"))
        assert rules == RuleSet(enabled=False)


def test_null_optional_fields_take_defaults():
    rules = build_rules(b'{"enabled": true, "start_hour": null, "end_hour": null, "days": null}')
    assert rules == RuleSet(enabled=True, start_hour=0, end_hour=23, days=DEFAULT_DAYS)


def test_null_hour_defaults_independently():
    rules = build_rules(b'{"enabled": true, "start_hour": 8, "end_hour": null}')
    assert (rules.start_hour, rules.end_hour) == (8, 23)


def test_null_enabled_is_still_invalid():
    assert build_rules(b'{"enabled": null, "days": null}').reason is LoadFailureReason.INVALID_FORMAT
