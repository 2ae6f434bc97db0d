from __future__ import annotations

from typing import Mapping

from .exceptions import (
    BadRequestError,
    ForbiddenError,
    GatewayTimeoutError,
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

GENERIC_MESSAGE = "An unexpected error occurred."

RETRYABLE_STATUSES = frozenset({0, 408, 429, 500, 502, 503, 504})

STATUS_MESSAGES: Mapping[int, str] = {
    0: "Network error. Please check your connection.",
    400: "Invalid request. Please check your input.",
    401: "Unauthorized. Please log in.",
    403: "Access forbidden.",
    404: "Tote not found. Please check the barcode.",
    408: "Request timeout. Please try again.",
    429: "Too many requests. Please wait a moment.",
    500: "Server error. Please try again later.",
    502: "Service temporarily unavailable.",
    503: "Service temporarily unavailable.",
    504: "Gateway timeout. Please try again.",
}

_STATUS_CLASSES: Mapping[int, type[ToteApiError]] = {
    0: NetworkUnreachableError,
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    408: RequestTimeoutError,
    429: TooManyRequestsError,
    500: ServerError,
    502: ServerError,
    503: ServerError,
    504: GatewayTimeoutError,
}


def is_retryable_status(status_code: int) -> bool:
    return status_code in RETRYABLE_STATUSES


def error_code(status_code: int) -> str:
    return f"HTTP_{status_code}"


def resolve_message(status_code: int, payload: object | None, fallback: str | None = None) -> str:
    if isinstance(payload, Mapping):
        body_message = payload.get("message")
        if isinstance(body_message, str) and body_message.strip():
            return body_message
    known = STATUS_MESSAGES.get(status_code)
    if known:
        return known
    return fallback or GENERIC_MESSAGE


def map_error(status_code: int, payload: object | None = None, message: str | None = None) -> ToteApiError:
    mapped = _STATUS_CLASSES.get(status_code, UnknownApiError)
    return mapped(
        code=error_code(status_code),
        message=resolve_message(status_code, payload, message),
        status_code=status_code,
        retryable=status_code != 404,
        details=payload,
    )


def map_failure(failure: TransportFailure) -> ToteApiError:
    return map_error(failure.status_code, failure.payload, failure.message)
