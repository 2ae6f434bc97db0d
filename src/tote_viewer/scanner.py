from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from .history_store import RecentBarcodes
from .orchestrator import ScanOutcome, ScanOutcomeKind, ToteRetriever
from .rate_limit import RateLimiter
from .validation import BarcodeValidator, ErrorTag, check_exists

DEBOUNCE_SECONDS = 0.3

COOLDOWN_MESSAGE = "Scan rate limited. Please wait."
TOO_MANY_SCANS_MESSAGE = "Too many scans. Please wait a moment."


class ScanStation:
    """Operator-facing entry point: validation and rate limiting before a scan."""

    def __init__(
        self,
        retriever: ToteRetriever,
        validator: BarcodeValidator | None = None,
        rate_limiter: RateLimiter | None = None,
        recent: RecentBarcodes | None = None,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.retriever = retriever
        self.validator = validator or BarcodeValidator()
        self.rate_limiter = rate_limiter or RateLimiter()
        self.recent = recent
        self.debounce_seconds = debounce_seconds
        self._sleep = sleep
        self._debounce_task: asyncio.Task[None] | None = None
        self._last_candidate: str | None = None

    @property
    def is_rate_limited(self) -> bool:
        return self.rate_limiter.is_rate_limited()

    async def submit(self, raw: str | None) -> ScanOutcome:
        barcode = (raw or "").strip()
        validation = self.validator.validate(raw)
        cooling_down = self.rate_limiter.is_rate_limited()
        window_open = self.rate_limiter.can_scan()
        self.rate_limiter.note_attempt()

        if cooling_down:
            return ScanOutcome(kind=ScanOutcomeKind.RATE_LIMITED, tote_id=barcode, message=COOLDOWN_MESSAGE)
        if not validation.valid:
            return ScanOutcome(
                kind=ScanOutcomeKind.REJECTED,
                tote_id=barcode,
                validation=validation,
                message=validation.message,
            )
        if not window_open:
            return ScanOutcome(kind=ScanOutcomeKind.RATE_LIMITED, tote_id=barcode, message=TOO_MANY_SCANS_MESSAGE)

        self.rate_limiter.record_scan()
        if self.recent is not None:
            self.recent.remember(barcode)
        return await self.retriever.scan(barcode)

    async def select_recent(self, barcode: str) -> ScanOutcome:
        return await self.submit(barcode)

    def input_changed(self, raw: str | None) -> asyncio.Task[None]:
        """Restart the debounce window for typed input; prefetch when it settles."""
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounced_prefetch(raw or ""))
        return self._debounce_task

    async def _debounced_prefetch(self, raw: str) -> None:
        await self._sleep(self.debounce_seconds)
        candidate = raw.strip()
        if candidate == self._last_candidate:
            return
        self._last_candidate = candidate
        if not self.validator.meets_min_length(candidate):
            return
        if not self.validator.validate(raw).valid:
            return
        await self.retriever.prefetch(candidate)

    async def verify_exists(self, raw: str | None) -> frozenset[ErrorTag]:
        """Optional async existence check layered on top of the sync checks."""
        return await check_exists(raw, self.retriever.tote_exists, sleep=self._sleep)

    def clear_history(self) -> None:
        if self.recent is not None:
            self.recent.clear()
        self.retriever.clear_history()
