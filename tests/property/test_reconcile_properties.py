"""Property-based tests for allowlist reconciliation."""

from __future__ import annotations

import pytest

pytest.importorskip("hypothesis")
from hypothesis import given, settings  # type: ignore  # noqa: E402
from hypothesis import strategies as st

from checks.run_make_makefiles import parse_allowlist_text, reconcile, render_allowlist
from contracts.tidy_contracts import Allowlist

_SEGMENT = st.from_regex(r"[a-z0-9_-]{1,12}", fullmatch=True)
_MARKER_PATH = st.lists(_SEGMENT, min_size=1, max_size=4).map(lambda parts: "/".join(["run-make", *parts, "Makefile"]))
_PATHS = st.sets(_MARKER_PATH, max_size=20)


@settings(max_examples=200, deadline=None, database=None)
@given(allowed=_PATHS, discovered=_PATHS)
def test_reconcile_is_set_difference(allowed: set[str], discovered: set[str]) -> None:
    """Violations are D - A, stale entries are A - D, and they never overlap."""
    result = reconcile(Allowlist.from_sequence(sorted(allowed)), discovered)

    assert set(result.violations) == discovered - allowed
    assert set(result.stale) == allowed - discovered
    assert not set(result.violations) & set(result.stale)
    assert list(result.violations) == sorted(result.violations)
    assert list(result.stale) == sorted(result.stale)


@settings(max_examples=200, deadline=None, database=None)
@given(allowed=_PATHS, discovered=_PATHS)
def test_reconcile_ignores_input_order(allowed: set[str], discovered: set[str]) -> None:
    forward = reconcile(Allowlist.from_sequence(sorted(allowed)), sorted(discovered))
    backward = reconcile(Allowlist.from_sequence(sorted(allowed, reverse=True)), sorted(discovered, reverse=True))
    assert forward == backward


@settings(max_examples=100, deadline=None, database=None)
@given(entries=_PATHS)
def test_rendered_allowlist_is_canonical(entries: set[str]) -> None:
    """A blessed file parses back to a sorted, duplicate-free allowlist."""
    allowlist = Allowlist.from_sequence(parse_allowlist_text(render_allowlist(sorted(entries))))
    assert allowlist.is_sorted
    assert not allowlist.has_duplicates
    assert set(allowlist) == entries
