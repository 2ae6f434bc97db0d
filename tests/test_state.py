from __future__ import annotations

from tote_viewer.models import INITIAL_STATE, ErrorState, LoadingState, ScanHistoryEntry, ScanStatus, ToteContents
from tote_viewer.state import ToteStore

from tote_helpers import tote_payload


def _tote(tote_id: str = "demo-tote-1") -> ToteContents:
    return ToteContents.model_validate(tote_payload(tote_id))


def test_subscribe_emits_current_value_then_changes() -> None:
    store = ToteStore()
    seen: list[ScanStatus] = []

    store.subscribe("scan_status", seen.append)
    store.set_scan_status(ScanStatus.SUCCESS)

    assert seen == [ScanStatus.IDLE, ScanStatus.SUCCESS]


def test_field_notifications_are_deduplicated_by_value() -> None:
    store = ToteStore()
    loading: list[LoadingState] = []
    errors: list[ErrorState] = []
    store.subscribe("loading", loading.append, emit_current=False)
    store.subscribe("error", errors.append, emit_current=False)

    store.set_loading(True, "Loading...")
    store.set_loading(True, "Loading...")
    store.set_last_scanned_id("demo-tote-1")

    assert loading == [LoadingState(is_loading=True, message="Loading...")]
    assert errors == []


def test_derived_booleans_dedupe() -> None:
    store = ToteStore()
    is_loading: list[bool] = []
    store.subscribe("is_loading", is_loading.append)

    store.set_loading(True, "one")
    store.set_loading(True, "two")
    store.set_loading(False)

    assert is_loading == [False, True, False]


def test_unsubscribe_stops_notifications() -> None:
    store = ToteStore()
    seen: list[object] = []
    unsubscribe = store.subscribe("last_scanned_id", seen.append, emit_current=False)

    store.set_last_scanned_id("a-b-1")
    unsubscribe()
    store.set_last_scanned_id("a-b-2")

    assert seen == ["a-b-1"]


def test_setters_replace_snapshots() -> None:
    store = ToteStore()
    before = store.state

    store.set_current_tote(_tote())

    assert store.state is not before
    assert before.current_tote is None
    assert store.state.current_tote == _tote()


def test_history_is_newest_first_and_bounded() -> None:
    store = ToteStore()
    for index in range(55):
        store.add_scan_history(ScanHistoryEntry(tote_id=f"t-t-{index}", success=True))

    history = store.state.scan_history
    assert len(history) == 50
    assert history[0].tote_id == "t-t-54"
    assert history[-1].tote_id == "t-t-5"


def test_scanning_implies_loading() -> None:
    store = ToteStore()

    store.set_scan_status(ScanStatus.SCANNING)
    assert store.state.loading.is_loading

    store.set_loading(False)
    assert store.state.loading.is_loading


def test_error_status_implies_error_state() -> None:
    store = ToteStore()

    store.set_scan_status(ScanStatus.ERROR)

    assert store.state.error.has_error
    assert store.state.error.retryable


def test_clear_error_leaves_error_status() -> None:
    store = ToteStore()
    store.fail_scan(ErrorState(has_error=True, message="down", code="HTTP_503", retryable=True))

    store.clear_error()

    assert store.state.error == ErrorState()
    assert store.state.scan_status is ScanStatus.IDLE


def test_compound_updates_publish_one_consistent_snapshot() -> None:
    store = ToteStore()
    snapshots = []
    store.subscribe("state", snapshots.append, emit_current=False)

    store.begin_scan()
    store.complete_scan(_tote(), "demo-tote-1", history=ScanHistoryEntry(tote_id="demo-tote-1", item_count=2, success=True))

    assert len(snapshots) == 2
    scanning, done = snapshots
    assert scanning.scan_status is ScanStatus.SCANNING and scanning.loading.is_loading
    assert done.scan_status is ScanStatus.SUCCESS
    assert not done.loading.is_loading
    assert done.last_scanned_id == "demo-tote-1"
    assert len(done.scan_history) == 1


def test_reset_restores_initial_snapshot() -> None:
    store = ToteStore()
    store.begin_scan()
    store.fail_scan(ErrorState(has_error=True, message="nope", code="HTTP_404", retryable=False))
    store.set_last_scanned_id("demo-tote-1")

    store.reset()

    assert store.state == INITIAL_STATE


def test_setter_called_from_listener_wins_over_outer_notification() -> None:
    store = ToteStore()
    last_ids: list[object] = []

    def on_status(status: ScanStatus) -> None:
        if status is ScanStatus.SUCCESS:
            store.set_last_scanned_id("override")

    store.subscribe("scan_status", on_status, emit_current=False)
    store.subscribe("last_scanned_id", last_ids.append, emit_current=False)

    store.complete_scan(_tote(), "demo-tote-1")

    assert store.state.last_scanned_id == "override"
    assert last_ids == ["override"]


def test_later_listeners_on_same_field_only_see_newest_value() -> None:
    store = ToteStore()
    second: list[object] = []

    def first(tote_id: object) -> None:
        if tote_id == "a-b-1":
            store.set_last_scanned_id("a-b-2")

    store.subscribe("last_scanned_id", first, emit_current=False)
    store.subscribe("last_scanned_id", second.append, emit_current=False)

    store.set_last_scanned_id("a-b-1")

    assert store.state.last_scanned_id == "a-b-2"
    assert second == ["a-b-2"]
