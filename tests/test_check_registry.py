"""Tests for the tidy check registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from checks import registry
from contracts.tidy_contracts import BlessOutcome, CheckOutcome, ReconciliationResult, TidyReport


@pytest.fixture
def empty_registry(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(registry, "_REGISTRY", {})


def _passing(root: str | Path, *, bless: bool = False, settings: object = None) -> CheckOutcome:
    return CheckOutcome(check="dummy", outcome=BlessOutcome.PASS, report=TidyReport(), result=ReconciliationResult())


def test_register_and_run_check(empty_registry: None, tmp_path: Path) -> None:
    registry.register_check("dummy")(_passing)

    assert registry.list_checks() == ["dummy"]
    assert registry.get_check("dummy") is _passing
    assert registry.run_check("dummy", tmp_path, bless=False).outcome is BlessOutcome.PASS


def test_duplicate_registration_is_rejected(empty_registry: None) -> None:
    registry.register_check("dummy")(_passing)

    with pytest.raises(KeyError):
        registry.register_check("dummy")(_passing)


def test_list_checks_is_sorted(empty_registry: None) -> None:
    for check_id in ("zeta", "alpha", "mid"):
        registry.register_check(check_id)(_passing)

    assert registry.list_checks() == ["alpha", "mid", "zeta"]


def test_unknown_check_raises(empty_registry: None, tmp_path: Path) -> None:
    with pytest.raises(KeyError, match="Unknown tidy check"):
        registry.run_check("missing", tmp_path, bless=False)


def test_run_make_check_registers_itself() -> None:
    import checks.run_make_makefiles as run_make

    assert registry.get_check(run_make.CHECK_ID) is run_make.check
