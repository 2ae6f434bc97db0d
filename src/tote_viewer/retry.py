from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .error_mapper import GENERIC_MESSAGE, is_retryable_status, map_failure
from .exceptions import ToteApiError, TransportFailure, UnknownApiError
from .logging import log_json

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
BASE_DELAY_SECONDS = 1.0


class RetryPolicy:
    """Bounded exponential backoff around one outbound call.

    Only transient statuses are retried. Whatever ends the loop is raised as a
    normalized :class:`~tote_viewer.exceptions.ToteApiError`.
    """

    def __init__(
        self,
        max_retries: int = MAX_RETRIES,
        base_delay_seconds: float = BASE_DELAY_SECONDS,
        jitter_seconds: tuple[float, float] = (0.0, 0.0),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.max_retries = max(0, max_retries)
        self.base_delay_seconds = max(0.0, base_delay_seconds)
        self.jitter_seconds = jitter_seconds
        self._sleep = sleep

    def backoff_delay(self, retry_number: int) -> float:
        delay = (2 ** (retry_number - 1)) * self.base_delay_seconds
        low, high = self.jitter_seconds
        if high > 0:
            delay += random.uniform(low, high)
        return delay

    async def run(self, operation: Callable[[], Awaitable[T]], *, label: str | None = None) -> T:
        attempt = 0
        while True:
            try:
                return await operation()
            except TransportFailure as failure:
                retryable = is_retryable_status(failure.status_code)
                if not retryable or attempt >= self.max_retries:
                    error = map_failure(failure)
                    if retryable:
                        log_json(
                            logger,
                            {
                                "event": "retry_exhausted",
                                "target": label,
                                "attempts": attempt + 1,
                                "status_code": failure.status_code,
                            },
                            level=logging.WARNING,
                        )
                    raise error from failure
                attempt += 1
                delay = self.backoff_delay(attempt)
                log_json(
                    logger,
                    {
                        "event": "retry_scheduled",
                        "target": label,
                        "retry": attempt,
                        "max_retries": self.max_retries,
                        "delay_seconds": delay,
                        "status_code": failure.status_code,
                    },
                )
                await self._sleep(delay)
            except ToteApiError:
                raise
            except Exception as exc:
                # Anything a transport raises besides TransportFailure is terminal.
                log_json(
                    logger,
                    {"event": "unexpected_failure", "target": label, "error": repr(exc)},
                    level=logging.ERROR,
                )
                raise UnknownApiError(
                    code="UNEXPECTED_ERROR",
                    message=str(exc) or GENERIC_MESSAGE,
                    status_code=0,
                    retryable=True,
                    details=type(exc).__name__,
                ) from exc
