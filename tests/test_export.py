from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path

from tote_viewer.export import export_filename, export_tote_csv
from tote_viewer.models import ToteContents

from tote_helpers import tote_payload


def test_export_filename() -> None:
    assert export_filename("demo-tote-1", datetime(2024, 5, 1, 9, 30)) == "tote-demo-tote-1-2024-05-01.csv"


def test_export_writes_header_and_rows(tmp_path: Path) -> None:
    contents = ToteContents.model_validate(tote_payload("demo-tote-1", (4, 0)))

    path = export_tote_csv(contents, tmp_path / "out", now=datetime(2024, 5, 1))

    assert path == tmp_path / "out" / "tote-demo-tote-1-2024-05-01.csv"
    with path.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.reader(handle))
    assert rows == [["SKU", "Name", "Quantity"], ["SKU-0", "Item 0", "4"], ["SKU-1", "Item 1", "0"]]


def test_export_defaults_to_exports_directory() -> None:
    contents = ToteContents.model_validate(tote_payload("demo-tote-1", ()))

    path = export_tote_csv(contents)

    assert path.parent == Path("exports")
    assert path.exists()
