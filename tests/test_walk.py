"""Tests for the shared directory walker."""

from __future__ import annotations

from pathlib import Path

import pytest

from infra.walk import filter_dirs, walk, walk_no_read


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")


def _rel(root: Path, entries) -> list[str]:
    return [Path(e.path).relative_to(root).as_posix() for e in entries]


def test_walk_yields_every_entry(tmp_path: Path) -> None:
    _touch(tmp_path / "b" / "x.txt")
    _touch(tmp_path / "a" / "y" / "z.txt")
    _touch(tmp_path / "top.txt")

    assert _rel(tmp_path, walk([tmp_path])) == ["a", "b", "top.txt", "a/y", "a/y/z.txt", "b/x.txt"]


def test_walk_is_lazy_and_restartable(tmp_path: Path) -> None:
    _touch(tmp_path / "one.txt")
    gen = walk([tmp_path])

    _touch(tmp_path / "two.txt")  # created before the first next()

    assert _rel(tmp_path, gen) == ["one.txt", "two.txt"]
    assert _rel(tmp_path, walk([tmp_path])) == ["one.txt", "two.txt"]


def test_walk_prunes_skipped_directories(tmp_path: Path) -> None:
    _touch(tmp_path / "keep" / "f.txt")
    _touch(tmp_path / "skip" / "g.txt")

    entries = walk([tmp_path], skip=lambda path, is_dir: is_dir and path.name == "skip")

    assert _rel(tmp_path, entries) == ["keep", "keep/f.txt"]


def test_walk_visits_multiple_roots_in_order(tmp_path: Path) -> None:
    _touch(tmp_path / "r2" / "b.txt")
    _touch(tmp_path / "r1" / "a.txt")

    assert _rel(tmp_path, walk([tmp_path / "r2", tmp_path / "r1"])) == ["r2/b.txt", "r1/a.txt"]


def test_walk_does_not_follow_directory_symlinks(tmp_path: Path) -> None:
    _touch(tmp_path / "real" / "f.txt")
    (tmp_path / "root").mkdir()
    (tmp_path / "root" / "link").symlink_to(tmp_path / "real", target_is_directory=True)

    assert _rel(tmp_path, walk([tmp_path / "root"])) == ["root/link"]


def test_walk_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        list(walk([tmp_path / "missing"]))


def test_walk_no_read_skips_tool_directories(tmp_path: Path) -> None:
    _touch(tmp_path / ".git" / "HEAD")
    _touch(tmp_path / "__pycache__" / "m.pyc")
    _touch(tmp_path / "src" / "m.py")

    assert _rel(tmp_path, walk_no_read([tmp_path])) == ["src", "src/m.py"]


def test_filter_dirs_only_matches_directories() -> None:
    assert filter_dirs(Path("x/.git"), True)
    assert not filter_dirs(Path("x/.git"), False)
    assert not filter_dirs(Path("x/src"), True)
