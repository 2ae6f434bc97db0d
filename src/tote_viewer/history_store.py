from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from .logging import log_json

logger = logging.getLogger(__name__)

DEFAULT_RECENT_FILE = Path.home() / ".tote_viewer_recent.json"
MAX_RECENT_BARCODES = 10


def _default_path() -> Path:
    configured = os.getenv("TOTE_RECENT_BARCODES_PATH", "").strip()
    return Path(configured) if configured else DEFAULT_RECENT_FILE


class RecentBarcodes:
    """Recently submitted barcodes, newest first, kept in a small JSON file.

    Storage is a convenience: read and write failures are logged and never
    raised to the caller.
    """

    def __init__(self, path: str | Path | None = None, limit: int = MAX_RECENT_BARCODES) -> None:
        self.path = Path(path) if path else _default_path()
        self.limit = max(1, limit)
        self.barcodes: list[str] = self.load()

    def load(self) -> list[str]:
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (ValueError, OSError) as exc:
            log_json(
                logger,
                {"event": "history_store_error", "operation": "load", "path": str(self.path), "error": str(exc)},
                level=logging.ERROR,
            )
            return []
        if not isinstance(payload, list):
            return []
        return [str(item) for item in payload if isinstance(item, str)][: self.limit]

    def save(self, barcodes: list[str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(barcodes, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            log_json(
                logger,
                {"event": "history_store_error", "operation": "save", "path": str(self.path), "error": str(exc)},
                level=logging.ERROR,
            )

    def remember(self, barcode: str) -> list[str]:
        self.barcodes = [barcode, *(item for item in self.barcodes if item != barcode)][: self.limit]
        self.save(self.barcodes)
        return self.barcodes

    def clear(self) -> None:
        self.barcodes = []
        self.save(self.barcodes)
