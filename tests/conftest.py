from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = BASE_DIR / "src"
TESTS_DIR = Path(__file__).resolve().parent

for path in (SRC_DIR, TESTS_DIR):
    sys.path.insert(0, str(path))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in (
        "TOTE_API_BASE_URL",
        "TOTE_TIMEOUT_SECONDS",
        "TOTE_RETRIES",
        "TOTE_RETRY_BACKOFF_SECONDS",
        "TOTE_RETRY_JITTER_ENABLED",
        "TOTE_RETRY_JITTER_MIN_SECONDS",
        "TOTE_RETRY_JITTER_MAX_SECONDS",
        "TOTE_CACHE_TTL_SECONDS",
        "TOTE_MAX_SCANS",
        "TOTE_RATE_WINDOW_SECONDS",
        "TOTE_SCAN_COOLDOWN_SECONDS",
        "TOTE_DEBOUNCE_SECONDS",
        "TOTE_BLACKLIST",
        "TOTE_DEFAULT_TOTE_ID",
        "TOTE_VERIFY_SSL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("TOTE_RECENT_BARCODES_PATH", str(tmp_path / "recent.json"))
    monkeypatch.chdir(tmp_path)
