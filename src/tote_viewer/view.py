from __future__ import annotations

import locale
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from .models import ToteItem

SortField = Literal["name", "sku", "quantity"]
SortDirection = Literal["asc", "desc"]

SORT_FIELDS: tuple[str, ...] = ("name", "sku", "quantity")


def _text_key(value: str) -> tuple[str, str]:
    return (locale.strxfrm(value.casefold()), locale.strxfrm(value))


def sort_items(
    items: Sequence[ToteItem] | None,
    field: SortField = "name",
    direction: SortDirection = "asc",
) -> list[ToteItem]:
    if not items:
        return []
    if field not in SORT_FIELDS:
        raise ValueError(f"Unsupported sort field: {field}")
    if direction not in {"asc", "desc"}:
        raise ValueError(f"Unsupported sort direction: {direction}")

    reverse = direction == "desc"
    if field == "quantity":
        return sorted(items, key=lambda item: item.quantity, reverse=reverse)
    return sorted(items, key=lambda item: _text_key(getattr(item, field)), reverse=reverse)


def filter_items(items: Sequence[ToteItem] | None, text: str | None) -> Sequence[ToteItem]:
    if not items:
        return items or []
    term = (text or "").strip().lower()
    if not term:
        return items
    return [item for item in items if term in item.name.lower() or term in item.sku.lower()]


def total_quantity(items: Sequence[ToteItem] | None) -> int:
    if not items:
        return 0
    return sum(item.quantity for item in items)


@dataclass(frozen=True)
class SortState:
    field: SortField = "name"
    direction: SortDirection = "asc"

    def toggle(self, field: SortField) -> "SortState":
        if field == self.field:
            return SortState(field=field, direction="desc" if self.direction == "asc" else "asc")
        return SortState(field=field, direction="asc")

    def apply(self, items: Sequence[ToteItem] | None) -> list[ToteItem]:
        return sort_items(items, self.field, self.direction)


@dataclass(frozen=True)
class ToteView:
    """What the presentation layer renders for the current tote."""

    sort: SortState = SortState()
    filter_text: str = ""

    def rows(self, items: Sequence[ToteItem] | None) -> list[ToteItem]:
        return self.sort.apply(filter_items(items, self.filter_text))
