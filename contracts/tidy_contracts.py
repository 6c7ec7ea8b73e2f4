"""
tidy_contracts.py

Shared data model for tidy checks.

A check never exits the process and never flips a global flag: it records
errors on a :class:`TidyReport` it was handed (or creates) and returns it.
The runner merges the reports of every check and decides the exit code.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from infra.logging_config import StructuredLogger

_LOG = StructuredLogger(__name__)


def normalize_rel_path(path: object) -> str:
    """Canonical forward-slash form used for allowlist entries and discovered markers."""
    return str(path).replace("\\", "/")


class ErrorKind(str, Enum):
    MALFORMED_ALLOWLIST = "malformed_allowlist"
    VIOLATION = "violation"
    STALE = "stale"


class CheckMode(str, Enum):
    CHECK = "check"
    BLESS = "bless"

    @classmethod
    def from_bless(cls, bless: bool) -> CheckMode:
        return cls.BLESS if bless else cls.CHECK


class BlessOutcome(str, Enum):
    """Terminal state of a check run.

    ``PASS``/``FAIL`` are reached in check mode, ``REWRITTEN``/``NO_OP`` in
    bless mode (a bless run can still fail on violations, see
    :attr:`CheckOutcome.bad`).
    """

    PASS = "pass"
    FAIL = "fail"
    REWRITTEN = "rewritten"
    NO_OP = "no-op"


@dataclass(frozen=True)
class TidyError:
    check: str
    kind: ErrorKind
    message: str
    path: str | None = None

    def __str__(self) -> str:
        return f"tidy error: {self.message}"


@dataclass
class TidyReport:
    """Append-only error accumulator for one or more checks."""

    errors: list[TidyError] = field(default_factory=list)

    @property
    def bad(self) -> bool:
        return bool(self.errors)

    def error(self, check: str, kind: ErrorKind, message: str, *, path: str | None = None) -> TidyError:
        err = TidyError(check=check, kind=kind, message=message, path=path)
        self.errors.append(err)
        # the runner prints recorded errors; the event is for structured log collectors
        _LOG.debug("tidy_error", str(err), check=check, kind=kind.value, path=path)
        return err

    def merge(self, other: TidyReport) -> None:
        self.errors.extend(other.errors)

    def of_kind(self, kind: ErrorKind) -> list[TidyError]:
        return [e for e in self.errors if e.kind is kind]

    def __iter__(self) -> Iterator[TidyError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)


@dataclass(frozen=True)
class Allowlist:
    """Permitted legacy paths, loaded once per run.

    ``entries`` holds each path once, in first-seen order; ``raw`` is the
    sequence exactly as read from the tracked file.
    """

    entries: tuple[str, ...]
    raw: tuple[str, ...] = ()

    @classmethod
    def from_sequence(cls, items: Iterable[str]) -> Allowlist:
        raw = tuple(normalize_rel_path(i) for i in items)
        return cls(entries=tuple(dict.fromkeys(raw)), raw=raw)

    @property
    def is_sorted(self) -> bool:
        return all(a < b for a, b in zip(self.raw, self.raw[1:]))

    @property
    def has_duplicates(self) -> bool:
        return len(self.entries) != len(self.raw)

    def as_set(self) -> frozenset[str]:
        return frozenset(self.entries)

    def __contains__(self, item: object) -> bool:
        return item in self.as_set()

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class ReconciliationResult:
    """Derived per run, never persisted."""

    violations: tuple[str, ...] = ()
    stale: tuple[str, ...] = ()

    @property
    def clean(self) -> bool:
        return not self.violations and not self.stale


@dataclass(frozen=True)
class CheckOutcome:
    check: str
    outcome: BlessOutcome
    report: TidyReport
    result: ReconciliationResult

    @property
    def bad(self) -> bool:
        return self.report.bad
