# checks/registry.py
"""
Lightweight tidy check registry.

The runner imports every module under the ``checks`` package. That import
registers the module's check function here, allowing uniform invocation
without runner special-casing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional

from contracts.tidy_contracts import CheckOutcome
from infra.config import TidySettings

# check(root, *, bless, settings) -> CheckOutcome
CheckFn = Callable[..., CheckOutcome]

_REGISTRY: Dict[str, CheckFn] = {}


def register_check(check_id: str) -> Callable[[CheckFn], CheckFn]:
    """Register a tidy check under *check_id* (e.g. "run_make_makefiles")."""
    def _decorator(fn: CheckFn) -> CheckFn:
        if check_id in _REGISTRY:
            raise KeyError(f"Tidy check already registered for '{check_id}'")
        _REGISTRY[check_id] = fn
        return fn
    return _decorator


def get_check(check_id: str) -> Optional[CheckFn]:
    return _REGISTRY.get(check_id)


def list_checks() -> List[str]:
    """All registered check ids in deterministic order."""
    return sorted(_REGISTRY.keys())


def run_check(check_id: str, root: str | Path, *, bless: bool, settings: TidySettings | None = None) -> CheckOutcome:
    fn = get_check(check_id)
    if fn is None:
        raise KeyError(f"Unknown tidy check '{check_id}'. Known: {', '.join(list_checks()) or '(none)'}")
    return fn(root, bless=bless, settings=settings)
