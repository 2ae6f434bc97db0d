from __future__ import annotations

from tote_viewer.models import ErrorState
from tote_viewer.ui_errors import to_user_facing_error


def test_no_error_maps_to_none() -> None:
    assert to_user_facing_error(ErrorState()) is None


def test_retryable_error_keeps_message() -> None:
    facing = to_user_facing_error(ErrorState(has_error=True, message="Server error.", code="HTTP_500", retryable=True))

    assert facing.message == "Server error."
    assert facing.details == "HTTP_500"
    assert facing.can_retry


def test_terminal_error_asks_to_check_the_id() -> None:
    facing = to_user_facing_error(ErrorState(has_error=True, message="Tote not found.", code="HTTP_404"))

    assert not facing.can_retry
    assert facing.message.startswith("Tote not found.")
    assert "Check the id" in facing.message
