from __future__ import annotations

from dataclasses import dataclass

from .models import ErrorState


@dataclass(frozen=True)
class UserFacingError:
    message: str
    details: str | None = None
    can_retry: bool = True


def to_user_facing_error(error: ErrorState) -> UserFacingError | None:
    if not error.has_error:
        return None
    primary = (error.message or "").strip() or "Request failed"
    if error.retryable:
        return UserFacingError(message=primary, details=error.code, can_retry=True)
    return UserFacingError(message=f"{primary} Check the id before scanning again.", details=error.code, can_retry=False)
