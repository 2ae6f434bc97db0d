from __future__ import annotations

from dataclasses import dataclass, field

from .cache import ToteCache
from .config import ToteViewerConfig
from .history_store import RecentBarcodes
from .orchestrator import ToteRetriever
from .rate_limit import RateLimiter
from .retry import RetryPolicy
from .scanner import ScanStation
from .state import ToteStore
from .transport import HttpToteTransport, ToteTransport
from .validation import BarcodeValidator


@dataclass
class ToteSession:
    """Wires one store, cache and scan station around a transport."""

    config: ToteViewerConfig
    transport: ToteTransport | None = None
    store: ToteStore = field(default_factory=ToteStore)
    recent: RecentBarcodes | None = None

    def __post_init__(self) -> None:
        self.transport = self.transport or HttpToteTransport(self.config)
        self.retry_policy = RetryPolicy(
            max_retries=self.config.retries,
            base_delay_seconds=self.config.retry_backoff_seconds,
            jitter_seconds=self.config.retry_jitter,
        )
        self.cache = ToteCache(
            self.transport.fetch_tote,
            retry_policy=self.retry_policy,
            ttl_seconds=self.config.cache_ttl_seconds,
        )
        self.retriever = ToteRetriever(self.store, self.cache)
        self.station = ScanStation(
            self.retriever,
            validator=BarcodeValidator(blacklist=self.config.blacklist),
            rate_limiter=RateLimiter(
                max_scans=self.config.max_scans,
                window_seconds=self.config.rate_window_seconds,
                cooldown_seconds=self.config.scan_cooldown_seconds,
            ),
            recent=self.recent,
            debounce_seconds=self.config.debounce_seconds,
        )

    async def aclose(self) -> None:
        self.cache.invalidate_all()
        close = getattr(self.transport, "aclose", None)
        if close is not None:
            await close()
