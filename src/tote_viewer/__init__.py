from .cache import CacheEntry, FetchHandle, ToteCache
from .config import ToteViewerConfig, load_config
from .error_mapper import map_error, map_failure
from .exceptions import (
    BadRequestError,
    ConfigError,
    ForbiddenError,
    GatewayTimeoutError,
    InvalidPayloadError,
    NetworkUnreachableError,
    NotFoundError,
    RequestTimeoutError,
    ServerError,
    ToteApiError,
    TooManyRequestsError,
    TransportFailure,
    UnauthorizedError,
    UnknownApiError,
)
from .history_store import RecentBarcodes
from .models import (
    AppState,
    ErrorState,
    LoadingState,
    ScanHistoryEntry,
    ScanStatus,
    ToteContents,
    ToteItem,
)
from .orchestrator import ScanOutcome, ScanOutcomeKind, ToteRetriever
from .rate_limit import RateLimiter
from .retry import RetryPolicy
from .scanner import ScanStation
from .session import ToteSession
from .state import ToteStore
from .transport import HttpToteTransport, ToteTransport
from .validation import BarcodeValidator, ErrorTag, ValidationResult, check_exists, validate
from .view import SortState, ToteView, filter_items, sort_items, total_quantity

__version__ = "0.1.0"

__all__ = [
    "AppState",
    "BadRequestError",
    "BarcodeValidator",
    "CacheEntry",
    "ConfigError",
    "ErrorState",
    "ErrorTag",
    "FetchHandle",
    "ForbiddenError",
    "GatewayTimeoutError",
    "HttpToteTransport",
    "InvalidPayloadError",
    "LoadingState",
    "NetworkUnreachableError",
    "NotFoundError",
    "RateLimiter",
    "RecentBarcodes",
    "RequestTimeoutError",
    "RetryPolicy",
    "ScanHistoryEntry",
    "ScanOutcome",
    "ScanOutcomeKind",
    "ScanStation",
    "ScanStatus",
    "ServerError",
    "SortState",
    "ToteApiError",
    "ToteCache",
    "ToteContents",
    "ToteItem",
    "ToteRetriever",
    "ToteSession",
    "ToteStore",
    "ToteTransport",
    "ToteView",
    "ToteViewerConfig",
    "TooManyRequestsError",
    "TransportFailure",
    "UnauthorizedError",
    "UnknownApiError",
    "ValidationResult",
    "check_exists",
    "filter_items",
    "load_config",
    "map_error",
    "map_failure",
    "sort_items",
    "total_quantity",
    "validate",
]
