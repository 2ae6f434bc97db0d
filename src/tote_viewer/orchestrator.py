from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from enum import Enum

from .cache import ToteCache
from .exceptions import NotFoundError, ToteApiError
from .logging import log_json
from .models import ErrorState, ScanHistoryEntry, ToteContents
from .state import ToteStore
from .validation import MIN_LENGTH, ValidationResult

logger = logging.getLogger(__name__)


class ScanOutcomeKind(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    REJECTED = "rejected"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class ScanOutcome:
    kind: ScanOutcomeKind
    tote_id: str
    contents: ToteContents | None = None
    error: ToteApiError | None = None
    validation: ValidationResult | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind is ScanOutcomeKind.SUCCESS


def error_state_from(error: ToteApiError) -> ErrorState:
    return ErrorState(
        has_error=True,
        message=error.message or "Failed to load tote contents",
        code=error.code,
        retryable=error.status_code != 404,
    )


class ToteRetriever:
    """Runs scans through the cache and publishes their results to the store."""

    def __init__(self, store: ToteStore, cache: ToteCache, min_prefetch_length: int = MIN_LENGTH) -> None:
        self.store = store
        self.cache = cache
        self.min_prefetch_length = min_prefetch_length
        self.last_attempted_id: str | None = None
        self._active_scans = 0
        # Fetch tasks whose terminal outcome already produced a history entry.
        self._recorded: weakref.WeakSet = weakref.WeakSet()

    async def scan(self, raw_barcode: str | None, *, use_cache: bool = True) -> ScanOutcome:
        tote_id = (raw_barcode or "").strip()
        if not tote_id:
            return ScanOutcome(
                kind=ScanOutcomeKind.REJECTED,
                tote_id="",
                message="Tote ID cannot be empty",
            )

        self.last_attempted_id = tote_id
        self._active_scans += 1
        self.store.begin_scan()
        handle = self.cache.get(tote_id, use_cache=use_cache)
        failure: ToteApiError | None = None
        try:
            contents = await handle
        except ToteApiError as error:
            failure = error
        finally:
            self._active_scans -= 1
        still_loading = self._active_scans > 0
        recorded_here = self._claim(handle.task)

        if failure is not None:
            history = None
            if recorded_here:
                history = ScanHistoryEntry(
                    tote_id=tote_id,
                    item_count=0,
                    success=False,
                    error_message=failure.message,
                )
            self.store.fail_scan(error_state_from(failure), history=history, still_loading=still_loading)
            log_json(
                logger,
                {
                    "event": "scan_failed",
                    "tote_id": tote_id,
                    "code": failure.code,
                    "status_code": failure.status_code,
                    "replayed": handle.replayed,
                },
                level=logging.WARNING,
            )
            return ScanOutcome(kind=ScanOutcomeKind.FAILURE, tote_id=tote_id, error=failure, message=failure.message)

        history = None
        if recorded_here:
            history = ScanHistoryEntry(tote_id=tote_id, item_count=contents.item_count, success=True)
        self.store.complete_scan(contents, tote_id, history=history, still_loading=still_loading)
        log_json(
            logger,
            {
                "event": "scan_succeeded",
                "tote_id": tote_id,
                "item_count": contents.item_count,
                "replayed": handle.replayed,
            },
        )
        return ScanOutcome(kind=ScanOutcomeKind.SUCCESS, tote_id=tote_id, contents=contents)

    async def prefetch(self, tote_id: str | None) -> bool:
        """Load a candidate id in the background.

        A success is published like a scan but never raises the loading
        state; a failure is logged and leaves the active error alone.
        """
        candidate = (tote_id or "").strip()
        if len(candidate) < self.min_prefetch_length or self.cache.contains(candidate):
            return False
        handle = self.cache.get(candidate)
        try:
            contents = await handle
        except ToteApiError as error:
            log_json(
                logger,
                {"event": "prefetch_failed", "tote_id": candidate, "code": error.code},
                level=logging.WARNING,
            )
            return False
        history = None
        if self._claim(handle.task):
            history = ScanHistoryEntry(tote_id=candidate, item_count=contents.item_count, success=True)
        self.store.complete_scan(contents, candidate, history=history, still_loading=self._active_scans > 0)
        log_json(logger, {"event": "prefetched", "tote_id": candidate, "item_count": contents.item_count})
        return True

    async def retry(self) -> ScanOutcome | None:
        tote_id = self._last_id()
        if tote_id is None:
            return None
        return await self.scan(tote_id)

    async def refresh(self) -> ScanOutcome | None:
        tote_id = self._last_id()
        if tote_id is None:
            return None
        self.cache.invalidate(tote_id)
        return await self.scan(tote_id)

    async def tote_exists(self, tote_id: str) -> bool:
        try:
            await self.cache.get(tote_id)
        except NotFoundError:
            return False
        return True

    def clear_history(self) -> None:
        self.store.clear_history()

    def clear_error(self) -> None:
        self.store.clear_error()

    def _last_id(self) -> str | None:
        return self.last_attempted_id or self.store.state.last_scanned_id

    def _claim(self, task: object) -> bool:
        if task in self._recorded:
            return False
        self._recorded.add(task)
        return True
