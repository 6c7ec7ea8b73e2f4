"""Path conventions for the tidy checks.

All code that needs to know where the run-make tests or the tracked allowlist
live should go through :class:`infra.repo_paths.TidyPaths`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

ALLOWLIST_FILENAME = "expected_run_make_makefiles.txt"
BLESSED_FILENAME = "blessed_expected_run_make_makefiles.txt"


def _p(path: str | Path) -> Path:
    return path if isinstance(path, Path) else Path(str(path))


def _require_simple_name(field_name: str, value: object) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string")
    if "/" in value or "\\" in value:
        raise ValueError(f"{field_name} must be a simple name, not a path: {value!r}")


@dataclass(frozen=True)
class TidyPaths:
    """
    Central path conventions for a repository checked by tidy.

    Rules:
      - Callers (runner/CLI/config) may override the run-make directory and
        the allowlist location; relative overrides resolve against ``root``
      - Default layout lives here, not scattered in code
      - Allowlist entries are relative to :meth:`tests_dir`, which is the
        parent of the run-make directory (``run-make/<test>/Makefile``)
    """

    root: Path = Path(".")

    tests_dirname: str = "tests"
    run_make_dirname: str = "run-make"
    tidy_src_parts: Tuple[str, ...] = ("src", "tools", "tidy", "src")
    allowlist_filename: str = ALLOWLIST_FILENAME
    blessed_filename: str = BLESSED_FILENAME

    run_make_override: Optional[Path] = None
    allowlist_override: Optional[Path] = None

    def __post_init__(self) -> None:
        for name in ("root", "run_make_override", "allowlist_override"):
            val = getattr(self, name)
            if val is None:
                continue
            if not isinstance(val, Path):
                raise TypeError(f"{name} must be a pathlib.Path (got {type(val)})")

        for dname in (
            "tests_dirname",
            "run_make_dirname",
            "allowlist_filename",
            "blessed_filename",
        ):
            _require_simple_name(dname, getattr(self, dname))
        for part in self.tidy_src_parts:
            _require_simple_name("tidy_src_parts", part)

        if self.allowlist_filename == self.blessed_filename:
            raise ValueError("blessed_filename must differ from allowlist_filename")

    # -------------------------
    # Resolved locations
    # -------------------------

    def _under_root(self, path: Path) -> Path:
        return path if path.is_absolute() else self.root / path

    def run_make_dir(self) -> Path:
        if self.run_make_override is not None:
            return self._under_root(self.run_make_override)
        return self.root / self.tests_dirname / self.run_make_dirname

    def tests_dir(self) -> Path:
        return self.run_make_dir().parent

    def tidy_src_dir(self) -> Path:
        return self.root.joinpath(*self.tidy_src_parts)

    def allowlist_file(self) -> Path:
        if self.allowlist_override is not None:
            return self._under_root(self.allowlist_override)
        return self.tidy_src_dir() / self.allowlist_filename

    def blessed_temp_file(self) -> Path:
        """Temp file the blessed allowlist is written to before the rename.

        Always a sibling of :meth:`allowlist_file` so the rename stays on one
        filesystem.
        """
        return self.allowlist_file().with_name(self.blessed_filename)

    def display(self, path: Path) -> str:
        """Repo-relative, forward-slash form of *path* for messages."""
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    # -------------------------
    # Constructors
    # -------------------------

    @classmethod
    def with_overrides(
        cls,
        root: str | Path,
        *,
        run_make_dir: str | Path | None = None,
        allowlist_path: str | Path | None = None,
    ) -> "TidyPaths":
        """
        Preferred way for runner/CLI to override locations without changing conventions.
        """
        return cls(
            root=_p(root),
            run_make_override=_p(run_make_dir) if run_make_dir else None,
            allowlist_override=_p(allowlist_path) if allowlist_path else None,
        )
