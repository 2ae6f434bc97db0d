"""Barcode validation.

Every check is independent: a check either passes or contributes exactly one
:class:`ErrorTag`, and the result of :func:`validate` is the union of the
failing tags. Empty input only ever yields ``REQUIRED``.
"""
from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from .logging import log_json

logger = logging.getLogger(__name__)

MIN_LENGTH = 3
MAX_LENGTH = 50
EXISTENCE_CHECK_DELAY_SECONDS = 0.5

ALPHANUMERIC_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
TOTE_ID_RE = re.compile(r"^[a-zA-Z0-9]+-[a-zA-Z0-9]+-\d+$")
_WHITESPACE_RE = re.compile(r"\s")
_SPECIAL_CHARS_RE = re.compile(r"[^a-zA-Z0-9_-]")
_DANGEROUS_PATTERNS = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"<iframe", re.IGNORECASE),
)


class ErrorTag(str, Enum):
    REQUIRED = "required"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    PATTERN = "pattern"
    WHITESPACE = "whitespace"
    SPECIAL_CHARS = "special_chars"
    TOTE_ID_FORMAT = "tote_id_format"
    BLACKLISTED = "blacklisted"
    DANGEROUS = "dangerous"
    NOT_FOUND = "not_found"


GENERIC_MESSAGE = "Invalid barcode"

ERROR_MESSAGES: dict[ErrorTag, str] = {
    ErrorTag.REQUIRED: "Barcode is required",
    ErrorTag.MIN_LENGTH: f"Barcode must be at least {MIN_LENGTH} characters",
    ErrorTag.MAX_LENGTH: f"Barcode cannot exceed {MAX_LENGTH} characters",
    ErrorTag.PATTERN: "Barcode can only contain letters, numbers, hyphens, and underscores",
    ErrorTag.WHITESPACE: "Barcode cannot contain spaces",
    ErrorTag.SPECIAL_CHARS: "Barcode contains invalid special characters",
    ErrorTag.TOTE_ID_FORMAT: "Invalid tote ID format. Expected: prefix-type-number (e.g., demo-tote-1)",
    ErrorTag.NOT_FOUND: "This barcode does not exist in the system",
    ErrorTag.BLACKLISTED: "This barcode is not allowed",
    ErrorTag.DANGEROUS: "Invalid input detected",
}

# Order in which a single message is chosen for display.
MESSAGE_PRIORITY = tuple(ERROR_MESSAGES)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: frozenset[ErrorTag] = field(default_factory=frozenset)

    @property
    def message(self) -> str | None:
        if self.valid:
            return None
        return first_error_message(self.errors)


def message_for(tag: ErrorTag | str) -> str:
    try:
        return ERROR_MESSAGES[ErrorTag(tag)]
    except (ValueError, KeyError):
        return GENERIC_MESSAGE


def first_error_message(errors: Iterable[ErrorTag | str]) -> str:
    present = set()
    for tag in errors:
        try:
            present.add(ErrorTag(tag))
        except ValueError:
            continue
    for tag in MESSAGE_PRIORITY:
        if tag in present:
            return ERROR_MESSAGES[tag]
    return GENERIC_MESSAGE


def check_required(raw: str) -> ErrorTag | None:
    return ErrorTag.REQUIRED if not raw.strip() else None


def check_min_length(raw: str, length: int = MIN_LENGTH) -> ErrorTag | None:
    value = raw.strip()
    if value and len(value) < length:
        return ErrorTag.MIN_LENGTH
    return None


def check_max_length(raw: str, length: int = MAX_LENGTH) -> ErrorTag | None:
    value = raw.strip()
    if value and len(value) > length:
        return ErrorTag.MAX_LENGTH
    return None


def check_pattern(raw: str, pattern: re.Pattern[str] = ALPHANUMERIC_RE) -> ErrorTag | None:
    value = raw.strip()
    if value and not pattern.match(value):
        return ErrorTag.PATTERN
    return None


def check_whitespace(raw: str) -> ErrorTag | None:
    if raw and _WHITESPACE_RE.search(raw):
        return ErrorTag.WHITESPACE
    return None


def check_special_chars(raw: str) -> ErrorTag | None:
    if raw and _SPECIAL_CHARS_RE.search(raw):
        return ErrorTag.SPECIAL_CHARS
    return None


def check_tote_id_format(raw: str) -> ErrorTag | None:
    value = raw.strip()
    if value and not TOTE_ID_RE.match(value):
        return ErrorTag.TOTE_ID_FORMAT
    return None


def check_blacklist(raw: str, blacklist: Iterable[str] = ()) -> ErrorTag | None:
    value = raw.strip().lower()
    if value and any(item.lower() == value for item in blacklist):
        return ErrorTag.BLACKLISTED
    return None


def check_dangerous(raw: str) -> ErrorTag | None:
    if raw and any(pattern.search(raw) for pattern in _DANGEROUS_PATTERNS):
        return ErrorTag.DANGEROUS
    return None


def validate(
    raw: str | None,
    *,
    min_length: int = MIN_LENGTH,
    max_length: int = MAX_LENGTH,
    blacklist: Iterable[str] = (),
) -> ValidationResult:
    value = raw or ""
    if check_required(value):
        return ValidationResult(valid=False, errors=frozenset({ErrorTag.REQUIRED}))

    results = (
        check_min_length(value, min_length),
        check_max_length(value, max_length),
        check_pattern(value),
        check_whitespace(value),
        check_special_chars(value),
        check_tote_id_format(value),
        check_blacklist(value, blacklist),
        check_dangerous(value),
    )
    errors = frozenset(tag for tag in results if tag is not None)
    return ValidationResult(valid=not errors, errors=errors)


@dataclass(frozen=True)
class BarcodeValidator:
    min_length: int = MIN_LENGTH
    max_length: int = MAX_LENGTH
    blacklist: frozenset[str] = field(default_factory=frozenset)
    # None means every check; otherwise only these tags are reported.
    enabled: frozenset[ErrorTag] | None = None

    def validate(self, raw: str | None) -> ValidationResult:
        result = validate(raw, min_length=self.min_length, max_length=self.max_length, blacklist=self.blacklist)
        if self.enabled is None:
            return result
        errors = frozenset(tag for tag in result.errors if tag in self.enabled or tag is ErrorTag.REQUIRED)
        return ValidationResult(valid=not errors, errors=errors)

    def meets_min_length(self, raw: str | None) -> bool:
        return len((raw or "").strip()) >= self.min_length


async def check_exists(
    raw: str | None,
    checker: Callable[[str], Awaitable[bool]],
    *,
    delay_seconds: float = EXISTENCE_CHECK_DELAY_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> frozenset[ErrorTag]:
    """Ask the backend whether the barcode exists.

    Fails open: if ``checker`` raises, the answer is unknown and nothing is
    reported, so a flaky backend never blocks a scan on its own.
    """
    value = (raw or "").strip()
    if not value:
        return frozenset()
    if delay_seconds > 0:
        await sleep(delay_seconds)
    try:
        exists = await checker(value)
    except Exception as exc:
        log_json(
            logger,
            {"event": "existence_check_failed", "tote_id": value, "error": str(exc)},
            level=logging.WARNING,
        )
        return frozenset()
    return frozenset() if exists else frozenset({ErrorTag.NOT_FOUND})
