from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

MAX_HISTORY_ENTRIES = 50


class ToteItem(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str
    sku: str
    name: str
    quantity: int = Field(ge=0)
    image_url: str | None = Field(default=None, alias="imageUrl")


class ToteContents(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    tote_id: str = Field(alias="toteId")
    items: tuple[ToteItem, ...] = ()
    updated_at: datetime = Field(alias="updatedAt")

    @property
    def item_count(self) -> int:
        return len(self.items)


class ScanHistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    tote_id: str
    scanned_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    item_count: int = 0
    success: bool
    error_message: str | None = None


class ScanStatus(str, Enum):
    IDLE = "IDLE"
    SCANNING = "SCANNING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass(frozen=True)
class LoadingState:
    is_loading: bool = False
    message: str | None = None


@dataclass(frozen=True)
class ErrorState:
    has_error: bool = False
    message: str | None = None
    code: str | None = None
    retryable: bool = False


@dataclass(frozen=True)
class AppState:
    current_tote: ToteContents | None = None
    scan_history: tuple[ScanHistoryEntry, ...] = field(default_factory=tuple)
    loading: LoadingState = field(default_factory=LoadingState)
    error: ErrorState = field(default_factory=ErrorState)
    scan_status: ScanStatus = ScanStatus.IDLE
    last_scanned_id: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.loading.is_loading

    @property
    def has_error(self) -> bool:
        return self.error.has_error


INITIAL_STATE = AppState()
