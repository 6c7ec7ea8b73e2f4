"""Contracts shared by tidy checks and the runner.

Main exports:
- TidyReport, TidyError, ErrorKind: error accumulation
- Allowlist, ReconciliationResult: reconciliation inputs and results
- CheckMode, BlessOutcome, CheckOutcome: run modes and terminal states
"""

from contracts import tidy_contracts

__all__ = [
    "Allowlist",
    "BlessOutcome",
    "CheckMode",
    "CheckOutcome",
    "ErrorKind",
    "ReconciliationResult",
    "TidyError",
    "TidyReport",
    "normalize_rel_path",
]

Allowlist = tidy_contracts.Allowlist
BlessOutcome = tidy_contracts.BlessOutcome
CheckMode = tidy_contracts.CheckMode
CheckOutcome = tidy_contracts.CheckOutcome
ErrorKind = tidy_contracts.ErrorKind
ReconciliationResult = tidy_contracts.ReconciliationResult
TidyError = tidy_contracts.TidyError
TidyReport = tidy_contracts.TidyReport
normalize_rel_path = tidy_contracts.normalize_rel_path
