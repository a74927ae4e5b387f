from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_LOG_PATH_ENV = "AIDA64_LOG_PATH"
_WARNING_ENV = "TEMP_WARNING_THRESHOLD"
_CRITICAL_ENV = "TEMP_CRITICAL_THRESHOLD"
_COOL_ENV = "TEMP_COOL_THRESHOLD"
_PAGE_REFRESH_ENV = "PAGE_REFRESH_SECONDS"
_TABLE_REFRESH_ENV = "TABLE_REFRESH_SECONDS"
_MOCK_SEED_ENV = "MOCK_SEED"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    log_path: str
    warning_threshold: float
    critical_threshold: float
    cool_threshold: Optional[float]
    page_refresh_seconds: float
    table_refresh_seconds: float
    mock_seed: Optional[int]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return float(candidate)
    except ValueError:
        return default


def _read_optional_float_env(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        return float(candidate)
    except ValueError:
        return None


def _read_interval(name: str, default: float) -> float:
    parsed = _read_float_env(name, default)
    return parsed if parsed > 0 else default


def _read_seed() -> Optional[int]:
    value = os.getenv(_MOCK_SEED_ENV)
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        return int(candidate)
    except ValueError:
        return None


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        log_path=_read_str_env(_LOG_PATH_ENV, "./data/aida64_log_log.csv"),
        warning_threshold=_read_float_env(_WARNING_ENV, 70.0),
        critical_threshold=_read_float_env(_CRITICAL_ENV, 80.0),
        cool_threshold=_read_optional_float_env(_COOL_ENV),
        page_refresh_seconds=_read_interval(_PAGE_REFRESH_ENV, 5.0),
        table_refresh_seconds=_read_interval(_TABLE_REFRESH_ENV, 3.0),
        mock_seed=_read_seed(),
        log_level=_read_log_level("INFO"),
    )
