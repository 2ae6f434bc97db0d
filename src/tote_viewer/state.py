"""Process-wide tote state with per-field change notifications."""
from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any

from .models import (
    INITIAL_STATE,
    MAX_HISTORY_ENTRIES,
    AppState,
    ErrorState,
    LoadingState,
    ScanHistoryEntry,
    ScanStatus,
    ToteContents,
)

Listener = Callable[[Any], None]
Unsubscribe = Callable[[], None]

SCANNING_MESSAGE = "Scanning..."
GENERIC_ERROR_MESSAGE = "Failed to load tote contents"

SELECTORS: dict[str, Callable[[AppState], Any]] = {
    "state": lambda state: state,
    "current_tote": lambda state: state.current_tote,
    "scan_history": lambda state: state.scan_history,
    "loading": lambda state: state.loading,
    "error": lambda state: state.error,
    "scan_status": lambda state: state.scan_status,
    "last_scanned_id": lambda state: state.last_scanned_id,
    "is_loading": lambda state: state.loading.is_loading,
    "has_error": lambda state: state.error.has_error,
}


class _Channel:
    """Listener list plus the last published value of one selector."""

    def __init__(self, selector: Callable[[AppState], Any], state: AppState) -> None:
        self.selector = selector
        self.last = selector(state)
        self.listeners: list[Listener] = []
        self.generation = 0

    def publish(self, state: AppState) -> None:
        value = self.selector(state)
        if value == self.last:
            return
        self.last = value
        self.generation += 1
        generation = self.generation
        for listener in list(self.listeners):
            listener(value)
            # A nested commit already delivered a newer value.
            if self.generation != generation:
                return


def _enforce_invariants(state: AppState) -> AppState:
    if state.scan_status is ScanStatus.SCANNING and not state.loading.is_loading:
        state = dataclasses.replace(state, loading=LoadingState(is_loading=True, message=SCANNING_MESSAGE))
    if state.scan_status is ScanStatus.ERROR and not state.error.has_error:
        state = dataclasses.replace(
            state,
            error=ErrorState(has_error=True, message=GENERIC_ERROR_MESSAGE, retryable=True),
        )
    return state


class ToteStore:
    def __init__(self, initial: AppState = INITIAL_STATE, history_limit: int = MAX_HISTORY_ENTRIES) -> None:
        self._initial = _enforce_invariants(initial)
        self._state = self._initial
        self.history_limit = max(1, history_limit)
        self._channels = {name: _Channel(selector, self._state) for name, selector in SELECTORS.items()}

    @property
    def state(self) -> AppState:
        return self._state

    def get_state(self) -> AppState:
        return self._state

    def subscribe(self, field: str, listener: Listener, *, emit_current: bool = True) -> Unsubscribe:
        try:
            channel = self._channels[field]
        except KeyError:
            raise ValueError(f"Unknown state field: {field}") from None
        channel.listeners.append(listener)
        if emit_current:
            listener(channel.last)

        def unsubscribe() -> None:
            if listener in channel.listeners:
                channel.listeners.remove(listener)

        return unsubscribe

    def set_current_tote(self, tote: ToteContents | None) -> None:
        self._commit(current_tote=tote)

    def set_loading(self, is_loading: bool, message: str | None = None) -> None:
        self._commit(loading=LoadingState(is_loading=is_loading, message=message))

    def set_error(
        self,
        has_error: bool,
        message: str | None = None,
        code: str | None = None,
        retryable: bool = True,
    ) -> None:
        self._commit(error=ErrorState(has_error=has_error, message=message, code=code, retryable=retryable))

    def set_scan_status(self, status: ScanStatus) -> None:
        self._commit(scan_status=status)

    def set_last_scanned_id(self, tote_id: str | None) -> None:
        self._commit(last_scanned_id=tote_id)

    def add_scan_history(self, entry: ScanHistoryEntry) -> None:
        self._commit(scan_history=self._with_history(entry))

    def clear_error(self) -> None:
        changes: dict[str, Any] = {"error": ErrorState()}
        if self._state.scan_status is ScanStatus.ERROR:
            changes["scan_status"] = ScanStatus.IDLE
        self._commit(**changes)

    def clear_history(self) -> None:
        self._commit(scan_history=())

    def reset(self) -> None:
        self._swap(self._initial)

    def begin_scan(self, message: str = SCANNING_MESSAGE) -> None:
        self._commit(
            scan_status=ScanStatus.SCANNING,
            error=ErrorState(),
            loading=LoadingState(is_loading=True, message=message),
        )

    def complete_scan(
        self,
        tote: ToteContents,
        tote_id: str,
        *,
        history: ScanHistoryEntry | None = None,
        still_loading: bool = False,
    ) -> None:
        changes: dict[str, Any] = {
            "current_tote": tote,
            "last_scanned_id": tote_id,
            "scan_status": ScanStatus.SUCCESS,
            "error": ErrorState(),
            "loading": self._loading_after_scan(still_loading),
        }
        if history is not None:
            changes["scan_history"] = self._with_history(history)
        self._commit(**changes)

    def fail_scan(
        self,
        error: ErrorState,
        *,
        history: ScanHistoryEntry | None = None,
        still_loading: bool = False,
    ) -> None:
        changes: dict[str, Any] = {
            "scan_status": ScanStatus.ERROR,
            "error": error,
            "loading": self._loading_after_scan(still_loading),
        }
        if history is not None:
            changes["scan_history"] = self._with_history(history)
        self._commit(**changes)

    def _loading_after_scan(self, still_loading: bool) -> LoadingState:
        if still_loading:
            return self._state.loading if self._state.loading.is_loading else LoadingState(True, SCANNING_MESSAGE)
        return LoadingState()

    def _with_history(self, entry: ScanHistoryEntry) -> tuple[ScanHistoryEntry, ...]:
        return ((entry,) + self._state.scan_history)[: self.history_limit]

    def _commit(self, **changes: Any) -> None:
        self._swap(_enforce_invariants(dataclasses.replace(self._state, **changes)))

    def _swap(self, new_state: AppState) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        for channel in self._channels.values():
            channel.publish(new_state)
            if self._state is not new_state:
                return
