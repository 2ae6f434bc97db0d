from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ToteApiError(Exception):
    code: str
    message: str
    status_code: int
    retryable: bool = True
    details: object | None = None

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.code}: {self.message}"


class NetworkUnreachableError(ToteApiError):
    """No HTTP response was received (status 0)."""


class BadRequestError(ToteApiError):
    pass


class UnauthorizedError(ToteApiError):
    pass


class ForbiddenError(ToteApiError):
    pass


class NotFoundError(ToteApiError):
    """404. The operator should check the id instead of retrying."""


class RequestTimeoutError(ToteApiError):
    pass


class TooManyRequestsError(ToteApiError):
    """429 throttling error."""


class ServerError(ToteApiError):
    """5xx server-side failures."""


class GatewayTimeoutError(ServerError):
    pass


class UnknownApiError(ToteApiError):
    pass


class InvalidPayloadError(ToteApiError):
    """The backend answered, but the body is not a tote."""


class TransportFailure(Exception):
    """Raw failure raised by a transport before normalization."""

    def __init__(self, status_code: int, payload: object | None = None, message: str | None = None) -> None:
        self.status_code = status_code
        self.payload = payload
        self.message = message
        super().__init__(message or f"HTTP {status_code}")


class ConfigError(ValueError):
    pass
