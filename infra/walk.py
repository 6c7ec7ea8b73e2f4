"""Directory walking shared by tidy checks."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

# skip(path, is_dir) -> True prunes a directory (or drops a file) from the walk.
SkipPredicate = Callable[[Path, bool], bool]

DEFAULT_SKIPPED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        "__pycache__",
    }
)


def filter_dirs(path: Path, is_dir: bool) -> bool:
    """Default prune predicate: skip VCS and tool cache directories."""
    return is_dir and path.name in DEFAULT_SKIPPED_DIRS


def walk(roots: Iterable[str | Path], skip: SkipPredicate | None = None) -> Iterator[os.DirEntry[str]]:
    """Yield every entry below *roots*.

    Lazy and single-pass; call again to restart. All entries of a directory
    are yielded in name order before its subdirectories are entered, first
    subdirectory first. Symlinked directories are reported but not entered.
    ``OSError`` from listing a directory (including a missing root) propagates.
    """
    pending: list[Path] = [Path(r) for r in roots]
    pending.reverse()
    while pending:
        directory = pending.pop()
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)

        subdirs: list[Path] = []
        for entry in entries:
            is_dir = entry.is_dir(follow_symlinks=False)
            if skip is not None and skip(Path(entry.path), is_dir):
                continue
            yield entry
            if is_dir:
                subdirs.append(Path(entry.path))
        pending.extend(reversed(subdirs))


def walk_no_read(roots: Iterable[str | Path], skip: SkipPredicate | None = None) -> Iterator[os.DirEntry[str]]:
    """Like :func:`walk` with :func:`filter_dirs` always applied.

    Callers only get directory entries; nothing here opens a file.
    """

    def _skip(path: Path, is_dir: bool) -> bool:
        if filter_dirs(path, is_dir):
            return True
        return skip(path, is_dir) if skip is not None else False

    return walk(roots, _skip)
