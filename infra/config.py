"""Centralized tidy configuration with schema validation.

This module is intentionally compatibility-first:
- Supports flat environment names (for example ``TIDY_ROOT``).
- Supports nested names (for example ``TIDY__ROOT``) for consistency.
- Optionally reads a local ``.env`` file before process env values.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from threading import Lock

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: object, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "":
        return default
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


class TidySettings(BaseModel):
    """Settings for the run-make Makefile allowlist check."""

    model_config = ConfigDict(frozen=True)

    root: str = Field(default=".", description="Repository root to check")
    bless: bool = Field(default=False, description="Rewrite the allowlist instead of failing on stale entries")
    marker_name: str = Field(default="Makefile", min_length=1)
    run_make_dir: str = Field(default="tests/run-make")
    allowlist_path: str | None = Field(default=None)

    @field_validator("bless", mode="before")
    @classmethod
    def _normalize_bless(cls, value: object) -> bool:
        return _parse_bool(value, default=False)

    @field_validator("root", "run_make_dir", mode="before")
    @classmethod
    def _normalize_required_text(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("marker_name")
    @classmethod
    def _validate_marker_name(cls, value: str) -> str:
        text = value.strip()
        if "/" in text or "\\" in text:
            raise ValueError("marker_name must be a bare file name")
        return text

    @field_validator("allowlist_path", mode="before")
    @classmethod
    def _normalize_optional_text(cls, value: object) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class LoggingSettings(BaseModel):
    """Repository-wide logging settings."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)
    override_root_handlers: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        text = str(value or "").strip().upper()
        if text in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return text
        return "INFO"

    @field_validator("json_logs", "override_root_handlers", mode="before")
    @classmethod
    def _normalize_flags(cls, value: object) -> bool:
        return _parse_bool(value, default=False)


class Settings(BaseModel):
    """Top-level settings model."""

    model_config = ConfigDict(frozen=True)

    tidy: TidySettings = Field(default_factory=TidySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_env(
        cls,
        *,
        env: Mapping[str, str] | None = None,
        env_file: str = ".env",
    ) -> Settings:
        """Build settings from `.env` then environment variables."""
        runtime_env = os.environ if env is None else env
        merged_env = _merge_env(_load_dotenv(Path(env_file)), runtime_env)
        payload = _build_payload(merged_env)
        return cls.model_validate(payload)


def _load_dotenv(path: Path) -> dict[str, str]:
    """Parse a minimal `.env` file format."""
    if not path.exists() or not path.is_file():
        return {}

    values: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, raw_value = line.split("=", 1)
        key_clean = key.strip()
        value = raw_value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        if key_clean:
            values[key_clean] = value
    return values


def _merge_env(dotenv_values: Mapping[str, str], runtime_env: Mapping[str, str]) -> dict[str, str]:
    """Return env map where process env overrides `.env` values."""
    merged = {str(k): str(v) for k, v in dotenv_values.items()}
    for key, value in runtime_env.items():
        merged[str(key)] = str(value)
    return merged


def _first_non_empty(env: Mapping[str, str], *keys: str) -> str | None:
    """Return the first non-empty value for the provided keys."""
    for key in keys:
        value = str(env.get(key, "")).strip()
        if value:
            return value
    return None


def _build_payload(env: Mapping[str, str]) -> dict[str, object]:
    """Build nested settings payload from env values."""
    tidy = {
        "root": _first_non_empty(env, "TIDY__ROOT", "TIDY_ROOT"),
        "bless": _first_non_empty(env, "TIDY__BLESS", "TIDY_BLESS"),
        "marker_name": _first_non_empty(env, "TIDY__MARKER_NAME", "TIDY_MARKER_NAME"),
        "run_make_dir": _first_non_empty(env, "TIDY__RUN_MAKE_DIR", "TIDY_RUN_MAKE_DIR"),
        "allowlist_path": _first_non_empty(env, "TIDY__ALLOWLIST_PATH", "TIDY_ALLOWLIST_PATH"),
    }
    logging_settings = {
        "level": _first_non_empty(env, "LOGGING__LEVEL", "TIDY_LOG_LEVEL"),
        "json_logs": _first_non_empty(env, "LOGGING__JSON_LOGS", "TIDY_LOG_JSON"),
        "override_root_handlers": _first_non_empty(
            env, "LOGGING__OVERRIDE_ROOT_HANDLERS", "TIDY_LOG_OVERRIDE"
        ),
    }
    return {
        "tidy": {k: v for k, v in tidy.items() if v is not None},
        "logging": {k: v for k, v in logging_settings.items() if v is not None},
    }


_SETTINGS_LOCK = Lock()
_SETTINGS_CACHE: Settings | None = None


def get_settings(*, reload: bool = False) -> Settings:
    """Return cached settings, optionally forcing reload from env."""
    global _SETTINGS_CACHE
    with _SETTINGS_LOCK:
        if reload or _SETTINGS_CACHE is None:
            _SETTINGS_CACHE = Settings.from_env()
        return _SETTINGS_CACHE


def clear_settings_cache() -> None:
    """Clear in-process settings cache."""
    global _SETTINGS_CACHE
    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None


__all__ = [
    "LoggingSettings",
    "Settings",
    "TidySettings",
    "get_settings",
    "clear_settings_cache",
    "ValidationError",
]
