"""In-flight and completed tote fetches, keyed by tote id.

At most one fetch per id is outstanding: callers that arrive while a fetch is
running, or after it completed, attach to the same task instead of issuing a
new request. Successful entries live for a fixed TTL measured from request
start; failed entries are dropped as soon as they settle.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Generator
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .exceptions import InvalidPayloadError
from .logging import log_json
from .models import ToteContents
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 5 * 60

Fetch = Callable[[str], Awaitable[dict[str, Any]]]


@dataclass
class CacheEntry:
    key: str
    task: asyncio.Task[ToteContents]
    created_at: float
    expiry: asyncio.TimerHandle | None = field(default=None, repr=False)


@dataclass
class FetchHandle:
    """Awaitable view of one shared fetch.

    Awaiting goes through :func:`asyncio.shield`, so cancelling one caller
    never cancels the fetch the other callers are attached to.
    """

    key: str
    task: asyncio.Task[ToteContents]
    replayed: bool = False

    async def result(self) -> ToteContents:
        return await asyncio.shield(self.task)

    def __await__(self) -> Generator[Any, None, ToteContents]:
        return self.result().__await__()


class ToteCache:
    def __init__(
        self,
        fetch: Fetch,
        retry_policy: RetryPolicy | None = None,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._fetch = fetch
        self._retry = retry_policy or RetryPolicy()
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, tote_id: object) -> bool:
        return isinstance(tote_id, str) and self.contains(tote_id)

    def contains(self, tote_id: str) -> bool:
        return tote_id.strip() in self._entries

    def peek(self, tote_id: str) -> CacheEntry | None:
        return self._entries.get(tote_id.strip())

    def get(self, tote_id: str, use_cache: bool = True) -> FetchHandle:
        key = tote_id.strip()
        if not key:
            raise ValueError("Tote ID cannot be empty")

        if use_cache:
            cached = self._entries.get(key)
            if cached is not None:
                log_json(logger, {"event": "cache_hit", "tote_id": key, "age_seconds": self._clock() - cached.created_at})
                return FetchHandle(key=key, task=cached.task, replayed=True)

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._load(key), name=f"tote-fetch:{key}")
        log_json(logger, {"event": "cache_miss", "tote_id": key, "use_cache": use_cache})
        if not use_cache:
            task.add_done_callback(_consume_exception)
            return FetchHandle(key=key, task=task)

        entry = CacheEntry(key=key, task=task, created_at=self._clock())
        entry.expiry = loop.call_later(self.ttl_seconds, self._expire, entry)
        self._entries[key] = entry
        task.add_done_callback(lambda settled: self._settled(entry, settled))
        return FetchHandle(key=key, task=task)

    def invalidate(self, tote_id: str) -> None:
        entry = self._entries.pop(tote_id.strip(), None)
        if entry is not None and entry.expiry is not None:
            entry.expiry.cancel()

    def invalidate_all(self) -> None:
        for entry in self._entries.values():
            if entry.expiry is not None:
                entry.expiry.cancel()
        self._entries.clear()

    async def _load(self, key: str) -> ToteContents:
        payload = await self._retry.run(lambda: self._fetch(key), label=key)
        try:
            return ToteContents.model_validate(payload)
        except PydanticValidationError as exc:
            raise InvalidPayloadError(
                code="INVALID_PAYLOAD",
                message="Received an invalid tote payload.",
                status_code=200,
                retryable=True,
                details=str(exc),
            ) from exc

    def _settled(self, entry: CacheEntry, task: asyncio.Task[ToteContents]) -> None:
        failed = task.cancelled() or task.exception() is not None
        if failed and self._entries.get(entry.key) is entry:
            self._drop(entry, reason="failed")

    def _expire(self, entry: CacheEntry) -> None:
        if self._entries.get(entry.key) is entry:
            self._drop(entry, reason="ttl")

    def _drop(self, entry: CacheEntry, *, reason: str) -> None:
        self._entries.pop(entry.key, None)
        if entry.expiry is not None:
            entry.expiry.cancel()
        log_json(logger, {"event": "cache_evicted", "tote_id": entry.key, "reason": reason})


def _consume_exception(task: asyncio.Task[Any]) -> None:
    if not task.cancelled():
        task.exception()
