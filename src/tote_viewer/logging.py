from __future__ import annotations

import json
import logging
from datetime import datetime, timezone


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(message)s")


def log_json(logger: logging.Logger, payload: dict, level: int = logging.INFO) -> None:
    if not logger.isEnabledFor(level):
        return
    record = {"ts": datetime.now(timezone.utc).isoformat(), **payload}
    logger.log(level, json.dumps(record, ensure_ascii=False, default=str))
