"""
runner.py

Tidy runner: runs every registered tidy check against a repository root and
aggregates their errors into one pass/fail result.

Default behavior: run ALL registered checks (discovered under the `checks` package).
Optional behavior: run only selected checks via --check, and/or exclude via --exclude-check.

Check everything:
python runner.py --root /path/to/repo

Regenerate tracked allowlists instead of failing on stale entries:
python runner.py --root /path/to/repo --bless

Run a subset:
python runner.py --check run_make_makefiles

Exit codes: 0 when no check recorded an error, 1 otherwise. I/O failures are
not caught and abort the run with a traceback.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import pkgutil
import sys
from pathlib import Path
from typing import List, Sequence

import checks  # IMPORTANT: used for module discovery
from checks.registry import list_checks, run_check
from contracts.tidy_contracts import CheckOutcome, TidyReport
from infra.config import TidySettings, get_settings
from infra.logging_config import setup_logging
from version import ALLOWLIST_FORMAT_VERSION, TIDY_NAME, TIDY_VERSION

LOG = logging.getLogger(__name__)


def _discover_all_check_ids() -> list[str]:
    """
    Import all modules under the `checks` package so they can register themselves.
    Returns all registered check ids in deterministic order.
    """
    prefix = checks.__name__ + "."
    for mod in pkgutil.walk_packages(checks.__path__, prefix):
        importlib.import_module(mod.name)

    ids = list_checks()
    if not ids:
        raise RuntimeError("No tidy checks registered. Ensure check modules register themselves in checks.registry.")
    return ids


def run_checks(
    root: str | Path,
    *,
    bless: bool = False,
    check_ids: Sequence[str] | None = None,
    exclude: Sequence[str] = (),
    settings: TidySettings | None = None,
) -> List[CheckOutcome]:
    """Run the selected checks (all registered ones by default) in id order."""
    known = _discover_all_check_ids()
    selected = list(check_ids) if check_ids is not None else known
    excluded = set(exclude)
    selected = [c for c in selected if c not in excluded]
    if not selected:
        raise RuntimeError("No tidy checks selected to run (after exclusions).")

    outcomes: List[CheckOutcome] = []
    for check_id in selected:
        LOG.debug("Running tidy check %s (bless=%s)", check_id, bless)
        outcome = run_check(check_id, root, bless=bless, settings=settings)
        LOG.info("Tidy check %s finished: %s (%d errors)", check_id, outcome.outcome.value, len(outcome.report))
        outcomes.append(outcome)
    return outcomes


def aggregate(outcomes: Sequence[CheckOutcome]) -> TidyReport:
    """Merge the per-check reports; the run is bad if any check was."""
    report = TidyReport()
    for outcome in outcomes:
        report.merge(outcome.report)
    return report


def _parse_args(argv: Sequence[str], settings: TidySettings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Tidy runner (repository hygiene checks)")

    parser.add_argument(
        "--root",
        default=settings.root,
        help="Repository root to check (default: TIDY_ROOT or the current directory).",
    )
    parser.add_argument(
        "--bless",
        action=argparse.BooleanOptionalAction,
        default=settings.bless,
        help="Regenerate tracked allowlists instead of reporting stale entries (or TIDY_BLESS=1).",
    )
    parser.add_argument(
        "--check",
        action="append",
        default=None,  # None means "user did not specify"
        help="Check id to run. Repeatable. If omitted, runs all checks.",
    )
    parser.add_argument(
        "--exclude-check",
        action="append",
        default=[],
        help="Check id(s) to exclude. Repeatable.",
    )

    # Logging
    parser.add_argument("--log-level", default=None, help="DEBUG|INFO|WARNING|ERROR (or TIDY_LOG_LEVEL).")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON logs on stderr (or TIDY_LOG_JSON=1).")

    # Convenience
    parser.add_argument("--list", action="store_true", help="List registered check ids and exit.")
    parser.add_argument(
        "--print-version",
        action="store_true",
        help="Print tool and allowlist format versions and exit.",
    )

    return parser.parse_args(argv)


def main(argv: Sequence[str]) -> int:
    settings = get_settings(reload=True).tidy
    args = _parse_args(argv, settings)

    if args.print_version:
        print(f"TIDY_NAME={TIDY_NAME}")
        print(f"TIDY_VERSION={TIDY_VERSION}")
        print(f"ALLOWLIST_FORMAT_VERSION={ALLOWLIST_FORMAT_VERSION}")
        return 0

    setup_logging(level=args.log_level, json_logs=True if args.json_logs else None)

    if args.list:
        for check_id in _discover_all_check_ids():
            print(check_id)
        return 0

    root = Path(args.root)
    outcomes = run_checks(
        root,
        bless=bool(args.bless),
        check_ids=args.check,
        exclude=args.exclude_check,
        settings=settings,
    )
    report = aggregate(outcomes)

    for err in report:
        print(err)

    print(f"\n--- {TIDY_NAME} {TIDY_VERSION} ---")
    for outcome in outcomes:
        print(f"{outcome.check}: {outcome.outcome.value} ({len(outcome.report)} errors)")

    if report.bad:
        print(f"some tidy checks failed ({len(report)} errors)")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
