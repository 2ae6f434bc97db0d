from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path

from .models import ToteContents

CSV_HEADERS = ("SKU", "Name", "Quantity")


def export_filename(tote_id: str, now: datetime | None = None) -> str:
    stamp = (now or datetime.now().astimezone()).strftime("%Y-%m-%d")
    return f"tote-{tote_id}-{stamp}.csv"


def export_tote_csv(contents: ToteContents, output_dir: str | Path = "exports", now: datetime | None = None) -> Path:
    destination = Path(output_dir)
    destination.mkdir(parents=True, exist_ok=True)
    path = destination / export_filename(contents.tote_id, now)

    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(CSV_HEADERS)
        for item in contents.items:
            writer.writerow([item.sku, item.name, item.quantity])
    return path
