"""Tests for logging setup and the structured error log emitted by TidyReport."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager

import pytest

from contracts.tidy_contracts import ErrorKind, TidyReport
from infra.logging_config import (
    JsonFormatter,
    TextFormatter,
    clear_log_context,
    get_log_context,
    set_log_context,
    setup_logging,
)


@contextmanager
def bare_root_logger() -> Iterator[logging.Logger]:
    # pytest attaches its capture handlers per test phase, so this must run
    # inside the test body
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    for h in saved_handlers:
        root.removeHandler(h)
    try:
        yield root
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)


def _record(msg: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("tidy.test", logging.ERROR, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_valid_json_with_extras_and_context() -> None:
    set_log_context(check="run_make_makefiles")
    try:
        line = JsonFormatter(extra_fields={"tool": "tidy"}).format(_record('quote " ok', kind="stale"))
    finally:
        clear_log_context()

    payload = json.loads(line)
    assert payload["message"] == 'quote " ok'
    assert payload["level"] == "ERROR"
    assert payload["kind"] == "stale"
    assert payload["tool"] == "tidy"
    assert payload["check"] == "run_make_makefiles"
    assert payload["timestamp"].endswith("Z")


def test_log_context_is_copied_and_cleared() -> None:
    clear_log_context()
    set_log_context(a=1)
    set_log_context(b=2)
    ctx = get_log_context()
    ctx["c"] = 3

    assert get_log_context() == {"a": 1, "b": 2}
    clear_log_context()
    assert get_log_context() == {}


def test_setup_logging_adds_text_handler_when_root_is_bare() -> None:
    with bare_root_logger() as root:
        setup_logging(level="debug")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)


def test_setup_logging_keeps_existing_handlers_unless_overridden() -> None:
    with bare_root_logger() as root:
        existing = logging.NullHandler()
        root.addHandler(existing)

        setup_logging(json_logs=True)
        assert root.handlers == [existing]

        setup_logging(json_logs=True, override_root_handlers=True)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)


def test_tidy_report_logs_each_error(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="contracts.tidy_contracts")
    report = TidyReport()

    report.error("run_make_makefiles", ErrorKind.VIOLATION, "bad Makefile", path="run-make/x/Makefile")

    [record] = caplog.records
    assert record.levelno == logging.DEBUG
    assert record.getMessage() == "tidy error: bad Makefile"
    assert record.event == "tidy_error"
    assert record.kind == "violation"
    assert record.path == "run-make/x/Makefile"


def test_tidy_report_merge_accumulates() -> None:
    first, second = TidyReport(), TidyReport()
    first.error("a", ErrorKind.STALE, "one")
    second.error("b", ErrorKind.VIOLATION, "two")

    first.merge(second)

    assert first.bad
    assert [e.check for e in first] == ["a", "b"]
    assert [e.check for e in first.of_kind(ErrorKind.VIOLATION)] == ["b"]
    assert not TidyReport().bad
