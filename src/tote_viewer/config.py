from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigError
from .history_store import DEFAULT_RECENT_FILE

DEFAULT_BASE_URL = "http://localhost:8080/api"


@dataclass(frozen=True)
class ToteViewerConfig:
    api_base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 10.0
    verify_ssl: bool = True
    retries: int = 3
    retry_backoff_seconds: float = 1.0
    retry_jitter_enabled: bool = False
    retry_jitter_min_seconds: float = 0.0
    retry_jitter_max_seconds: float = 0.25
    cache_ttl_seconds: float = 300.0
    max_scans: int = 5
    rate_window_seconds: float = 10.0
    scan_cooldown_seconds: float = 0.5
    debounce_seconds: float = 0.3
    blacklist: frozenset[str] = field(default_factory=frozenset)
    recent_barcodes_path: Path = DEFAULT_RECENT_FILE
    default_tote_id: str | None = "demo-tote-1"

    @property
    def retry_jitter(self) -> tuple[float, float]:
        if not self.retry_jitter_enabled:
            return (0.0, 0.0)
        return (self.retry_jitter_min_seconds, self.retry_jitter_max_seconds)


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def _read_blacklist() -> frozenset[str]:
    raw = os.getenv("TOTE_BLACKLIST") or ""
    return frozenset(item.strip() for item in raw.split(",") if item.strip())


def load_config(env_file: str | None = None) -> ToteViewerConfig:
    """Load config from environment with optional .env override."""
    load_dotenv(env_file)

    api_base_url = (os.getenv("TOTE_API_BASE_URL") or "").strip() or DEFAULT_BASE_URL

    timeout_seconds = _read_float("TOTE_TIMEOUT_SECONDS", "10")
    _validate(timeout_seconds > 0, f"Invalid TOTE_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}")

    retries = _read_int("TOTE_RETRIES", "3")
    _validate(retries >= 0, f"Invalid TOTE_RETRIES: expected >= 0, got {retries}")

    retry_backoff_seconds = _read_float("TOTE_RETRY_BACKOFF_SECONDS", "1.0")
    _validate(
        retry_backoff_seconds >= 0,
        f"Invalid TOTE_RETRY_BACKOFF_SECONDS: expected >= 0, got {retry_backoff_seconds}",
    )

    retry_jitter_enabled = _coerce_bool(os.getenv("TOTE_RETRY_JITTER_ENABLED"), False)
    retry_jitter_min_seconds = _read_float("TOTE_RETRY_JITTER_MIN_SECONDS", "0")
    retry_jitter_max_seconds = _read_float("TOTE_RETRY_JITTER_MAX_SECONDS", "0.25")
    _validate(
        retry_jitter_min_seconds >= 0,
        f"Invalid TOTE_RETRY_JITTER_MIN_SECONDS: expected >= 0, got {retry_jitter_min_seconds}",
    )
    _validate(
        retry_jitter_max_seconds >= retry_jitter_min_seconds,
        (
            "Invalid TOTE_RETRY_JITTER_MAX_SECONDS: "
            f"expected >= {retry_jitter_min_seconds}, got {retry_jitter_max_seconds}"
        ),
    )

    cache_ttl_seconds = _read_float("TOTE_CACHE_TTL_SECONDS", "300")
    _validate(cache_ttl_seconds > 0, f"Invalid TOTE_CACHE_TTL_SECONDS: expected > 0, got {cache_ttl_seconds}")

    max_scans = _read_int("TOTE_MAX_SCANS", "5")
    _validate(max_scans >= 1, f"Invalid TOTE_MAX_SCANS: expected >= 1, got {max_scans}")

    rate_window_seconds = _read_float("TOTE_RATE_WINDOW_SECONDS", "10")
    _validate(
        rate_window_seconds > 0,
        f"Invalid TOTE_RATE_WINDOW_SECONDS: expected > 0, got {rate_window_seconds}",
    )

    scan_cooldown_seconds = _read_float("TOTE_SCAN_COOLDOWN_SECONDS", "0.5")
    _validate(
        scan_cooldown_seconds >= 0,
        f"Invalid TOTE_SCAN_COOLDOWN_SECONDS: expected >= 0, got {scan_cooldown_seconds}",
    )

    debounce_seconds = _read_float("TOTE_DEBOUNCE_SECONDS", "0.3")
    _validate(debounce_seconds >= 0, f"Invalid TOTE_DEBOUNCE_SECONDS: expected >= 0, got {debounce_seconds}")

    recent_path = (os.getenv("TOTE_RECENT_BARCODES_PATH") or "").strip()
    default_tote_id = (os.getenv("TOTE_DEFAULT_TOTE_ID", "demo-tote-1") or "").strip() or None

    return ToteViewerConfig(
        api_base_url=api_base_url.rstrip("/"),
        timeout_seconds=timeout_seconds,
        verify_ssl=_coerce_bool(os.getenv("TOTE_VERIFY_SSL"), True),
        retries=retries,
        retry_backoff_seconds=retry_backoff_seconds,
        retry_jitter_enabled=retry_jitter_enabled,
        retry_jitter_min_seconds=retry_jitter_min_seconds,
        retry_jitter_max_seconds=retry_jitter_max_seconds,
        cache_ttl_seconds=cache_ttl_seconds,
        max_scans=max_scans,
        rate_window_seconds=rate_window_seconds,
        scan_cooldown_seconds=scan_cooldown_seconds,
        debounce_seconds=debounce_seconds,
        blacklist=_read_blacklist(),
        recent_barcodes_path=Path(recent_path) if recent_path else DEFAULT_RECENT_FILE,
        default_tote_id=default_tote_id,
    )
