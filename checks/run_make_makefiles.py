"""
Tidy check: no new Makefiles under ``tests/run-make/``.

Legacy run-make tests are defined by a ``Makefile``; new tests must use
``rmake.rs``. The Makefiles that still exist are tracked in
``expected_run_make_makefiles.txt``, a literal list of paths relative to the
tests directory:

    /*
    ============================================================
        ⚠️⚠️⚠️NOTHING SHOULD EVER BE ADDED TO THIS LIST⚠️⚠️⚠️
    ============================================================
    */
    [
    "run-make/foo/Makefile",
    ]

The check reports Makefiles that are not listed (violations) and listed
entries without a Makefile on disk (stale). With ``--bless`` stale entries
are pruned by regenerating the file instead; violations are still errors.

I/O problems (missing allowlist, missing run-make directory, failed rename)
propagate to the caller. Policy problems are recorded on the report so one run
surfaces all of them.
"""

from __future__ import annotations

import ast
import json
import logging
import re
from collections.abc import Iterable
from pathlib import Path

from checks.registry import register_check
from contracts.tidy_contracts import (
    Allowlist,
    BlessOutcome,
    CheckMode,
    CheckOutcome,
    ErrorKind,
    ReconciliationResult,
    TidyReport,
    normalize_rel_path,
)
from infra.config import TidySettings, get_settings
from infra.logging_config import clear_log_context, set_log_context
from infra.repo_paths import TidyPaths
from infra.walk import walk_no_read

LOG = logging.getLogger(__name__)

CHECK_ID = "run_make_makefiles"
MARKER_NAME = "Makefile"

ALLOWLIST_HEADER = """/*
============================================================
    ⚠️⚠️⚠️NOTHING SHOULD EVER BE ADDED TO THIS LIST⚠️⚠️⚠️
============================================================
*/
"""

# String literals are matched (group 1) so comment markers inside them survive.
_COMMENT_RE = re.compile(
    r"""("(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*')|/\*.*?\*/|//[^\n]*""",
    re.DOTALL,
)

_BLESS_HINT = "please only update it with command `x test tidy --bless`"


class AllowlistFormatError(ValueError):
    """The allowlist file is not a literal list of strings."""


# -----------------------------
# Allowlist file
# -----------------------------


def _strip_comments(text: str) -> str:
    def _keep_strings(m: re.Match[str]) -> str:
        literal = m.group(1)
        return literal if literal is not None else ""

    return _COMMENT_RE.sub(_keep_strings, text)


def parse_allowlist_text(text: str, *, source: str = "<allowlist>") -> list[str]:
    """Return the string literals of an allowlist file, in file order."""
    body = _strip_comments(text).strip()
    try:
        value = ast.literal_eval(body)
    except (SyntaxError, ValueError) as exc:
        raise AllowlistFormatError(f"{source}: expected a literal list of strings ({exc})") from exc

    if not isinstance(value, list):
        raise AllowlistFormatError(f"{source}: expected a list, got {type(value).__name__}")
    for item in value:
        if not isinstance(item, str):
            raise AllowlistFormatError(f"{source}: expected string entries, got {item!r}")
    return value


def render_allowlist(entries: Iterable[str]) -> str:
    """Persisted form of an allowlist: warning header, one entry per line."""
    lines = [ALLOWLIST_HEADER, "[\n"]
    for entry in entries:
        lines.append(f"{json.dumps(entry, ensure_ascii=False)},\n")
    lines.append("]\n")
    return "".join(lines)


def load_allowlist(
    path: str | Path,
    *,
    bless: bool = False,
    report: TidyReport | None = None,
    display: str | None = None,
) -> Allowlist:
    """Read the allowlist at *path* and validate that it is sorted and unique.

    Broken invariants are recorded on *report* as ``malformed_allowlist``
    errors unless blessing.
    """
    path = Path(path)
    shown = display or path.as_posix()
    allowlist = Allowlist.from_sequence(
        parse_allowlist_text(path.read_text(encoding="utf-8"), source=shown)
    )

    if report is not None and not bless:
        if not allowlist.is_sorted:
            report.error(
                CHECK_ID,
                ErrorKind.MALFORMED_ALLOWLIST,
                f"`{shown}` is not in order, likely because you modified it manually, {_BLESS_HINT}",
                path=shown,
            )
        if allowlist.has_duplicates:
            report.error(
                CHECK_ID,
                ErrorKind.MALFORMED_ALLOWLIST,
                f"`{shown}` contains duplicate entries, likely because you modified it manually, "
                f"{_BLESS_HINT}",
                path=shown,
            )
    return allowlist


def write_allowlist(path: Path, temp_path: Path, entries: Iterable[str]) -> None:
    """Atomically replace *path* with a regenerated allowlist.

    The content goes to *temp_path* first (which must not exist yet) and is
    then renamed over *path*, so readers see either the old or the new file.
    """
    content = render_allowlist(entries)
    try:
        with temp_path.open("x", encoding="utf-8", newline="\n") as fh:
            fh.write(content)
        temp_path.replace(path)
    except FileExistsError:
        # left over from another run; not ours to delete
        raise
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


# -----------------------------
# Filesystem
# -----------------------------


def scan(root: str | Path, tests_root: str | Path, *, marker_name: str = MARKER_NAME) -> frozenset[str]:
    """Find every *marker_name* file below *root*.

    Paths are relative to *tests_root* with forward slashes. File contents are
    never read.
    """
    tests_root = Path(tests_root)
    found: set[str] = set()
    for entry in walk_no_read([root]):
        if entry.is_dir(follow_symlinks=False):
            continue
        if entry.name != marker_name:
            continue
        rel = Path(entry.path).relative_to(tests_root)
        found.add(normalize_rel_path(rel.as_posix()))
    return frozenset(found)


# -----------------------------
# Reconciliation
# -----------------------------


def reconcile(allowlist: Allowlist | Iterable[str], discovered: Iterable[str]) -> ReconciliationResult:
    allowed = allowlist.as_set() if isinstance(allowlist, Allowlist) else frozenset(allowlist)
    found = frozenset(discovered)
    return ReconciliationResult(
        violations=tuple(sorted(found - allowed)),
        stale=tuple(sorted(allowed - found)),
    )


def apply(
    mode: CheckMode,
    result: ReconciliationResult,
    allowlist: Allowlist,
    *,
    paths: TidyPaths,
    report: TidyReport,
    marker_name: str = MARKER_NAME,
) -> BlessOutcome:
    """Report the reconciliation *result* and, when blessing, prune stale entries.

    A bless run only writes when something is stale; otherwise the tracked
    file is left exactly as it is, even if it is not in canonical form.
    """
    allowlist_shown = paths.display(paths.allowlist_file())
    tests_dir = paths.tests_dir()

    for rel in result.violations:
        report.error(
            CHECK_ID,
            ErrorKind.VIOLATION,
            f"found run-make {marker_name} not permitted in `{allowlist_shown}`, please write new "
            f"run-make tests with `rmake.rs` instead: {paths.display(tests_dir / rel)}",
            path=rel,
        )

    if mode is CheckMode.CHECK:
        for rel in result.stale:
            report.error(
                CHECK_ID,
                ErrorKind.STALE,
                f"{marker_name} `{paths.display(tests_dir / rel)}` no longer exists and should be removed "
                f"from the exclusions in `{allowlist_shown}`",
                path=rel,
            )
        return BlessOutcome.FAIL if report.bad else BlessOutcome.PASS

    if not result.stale:
        LOG.debug("Allowlist %s has no stale entries", allowlist_shown)
        return BlessOutcome.NO_OP

    stale = set(result.stale)
    kept = sorted(e for e in allowlist.entries if e not in stale)
    write_allowlist(paths.allowlist_file(), paths.blessed_temp_file(), kept)
    LOG.info(
        "Blessed %s: removed %d stale entries, %d remain",
        allowlist_shown,
        len(stale),
        len(kept),
    )
    return BlessOutcome.REWRITTEN


# -----------------------------
# Entry point
# -----------------------------


@register_check(CHECK_ID)
def check(root: str | Path, *, bless: bool = False, settings: TidySettings | None = None) -> CheckOutcome:
    """Run the check against the repository at *root*."""
    tidy = settings or get_settings().tidy
    paths = TidyPaths.with_overrides(
        Path(root),
        run_make_dir=tidy.run_make_dir,
        allowlist_path=tidy.allowlist_path,
    )
    mode = CheckMode.from_bless(bless)
    report = TidyReport()

    set_log_context(check=CHECK_ID, mode=mode.value)
    try:
        allowlist = load_allowlist(
            paths.allowlist_file(),
            bless=bless,
            report=report,
            display=paths.display(paths.allowlist_file()),
        )
        discovered = scan(paths.run_make_dir(), paths.tests_dir(), marker_name=tidy.marker_name)
        LOG.debug(
            "Found %d %s files, %d allowlisted",
            len(discovered),
            tidy.marker_name,
            len(allowlist),
        )
        result = reconcile(allowlist, discovered)
        outcome = apply(mode, result, allowlist, paths=paths, report=report, marker_name=tidy.marker_name)
    finally:
        clear_log_context()

    return CheckOutcome(check=CHECK_ID, outcome=outcome, report=report, result=result)
