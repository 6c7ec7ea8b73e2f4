"""
Tidy CLI (flat-layout friendly).

Usage
-----
tidy check                      # fail on unlisted or stale run-make Makefiles
tidy bless                      # prune stale entries from the tracked allowlist
tidy check --root ../other-repo --check run_make_makefiles
tidy list
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import List, Optional

import runner


def _walk_up_for_root(start: Path) -> Optional[Path]:
    """Walk up from *start* to find a repository root marker.

    A directory holding ``tests/run-make`` wins over any nearer
    ``pyproject.toml``; the latter is only a fallback.
    """
    cur = start.resolve()
    if cur.is_file():
        cur = cur.parent
    candidates = [cur, *cur.parents][:10]
    for marker in (Path("tests") / "run-make", Path("pyproject.toml")):
        for cand in candidates:
            if (cand / marker).exists():
                return cand
    return None


def _repo_root() -> Path:
    """Resolve the repository to check.

    You typically run the command from somewhere inside the repository, so the
    current working directory is searched first.
    """
    return _walk_up_for_root(Path.cwd()) or Path.cwd().resolve()


def _env_default(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.environ.get(name)
    if v is None or v == "":
        return default
    return v


def _runner_argv(args: argparse.Namespace, *, bless: bool) -> List[str]:
    root = args.root or _env_default("TIDY_ROOT") or str(_repo_root())
    argv = ["--root", root, "--bless" if bless else "--no-bless"]
    for check_id in args.check or []:
        argv += ["--check", check_id]
    if args.log_level:
        argv += ["--log-level", args.log_level]
    if args.json_logs:
        argv.append("--json-logs")
    return argv


def cmd_check(args: argparse.Namespace) -> int:
    return runner.main(_runner_argv(args, bless=False))


def cmd_bless(args: argparse.Namespace) -> int:
    return runner.main(_runner_argv(args, bless=True))


def cmd_list(args: argparse.Namespace) -> int:  # pylint: disable=unused-argument
    return runner.main(["--list"])


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tidy", description="Repository tidy checks")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_run_options(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--root", default=None, help="Repository root (or TIDY_ROOT env var). Default: auto-detected.")
        sp.add_argument("--check", action="append", default=None, help="Check id to run. Repeatable.")
        sp.add_argument("--log-level", default=None, help="DEBUG|INFO|WARNING|ERROR")
        sp.add_argument("--json-logs", action="store_true", help="Emit JSON logs on stderr.")

    sp = sub.add_parser("check", help="Report policy violations; modifies nothing.")
    add_run_options(sp)
    sp.set_defaults(func=cmd_check)

    sp = sub.add_parser("bless", help="Regenerate tracked allowlists, then report remaining violations.")
    add_run_options(sp)
    sp.set_defaults(func=cmd_bless)

    sp = sub.add_parser("list", help="List registered tidy checks.")
    sp.set_defaults(func=cmd_list)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
