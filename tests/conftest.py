"""Global pytest fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from infra.config import clear_settings_cache


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep developer env vars and `.env` files out of tests."""
    for key in list(os.environ):
        if key.startswith(("TIDY_", "TIDY__", "LOGGING__")):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
