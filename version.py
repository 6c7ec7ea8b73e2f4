"""Project version constants.

These constants are printed by the runner (``--print-version``) so that a tidy
failure in CI logs can be traced back to a specific tool and allowlist format.
"""

TIDY_NAME: str = "runmake-tidy"
TIDY_VERSION: str = "0.1.0"

ALLOWLIST_FORMAT_VERSION: int = 1
