from domain.models import ElementKind, Venue
from services.sync_state import (
    INITIAL_STATE,
    SyncPhase,
    SyncStatus,
    begin_loading,
    complete_failure,
    complete_success,
    reset,
)

VENUE = Venue(id=1, kind=ElementKind.NODE, lat=1.0, lon=2.0, tags={})


def test_initial_state_is_idle_and_empty():
    assert INITIAL_STATE.status is SyncStatus.IDLE
    assert INITIAL_STATE.venues == ()
    assert INITIAL_STATE.error is None


def test_begin_loading_clears_error_but_keeps_venues():
    failed = complete_failure(INITIAL_STATE, "boom")
    shown = complete_success(failed, (VENUE,))
    loading = begin_loading(complete_failure(shown, "boom"), generation=3)
    assert loading.status is SyncStatus.LOADING
    assert loading.error is None
    assert loading.generation == 3

    loading_again = begin_loading(shown, generation=4)
    assert loading_again.venues == (VENUE,)


def test_success_replaces_venues():
    state = complete_success(begin_loading(INITIAL_STATE, 1), (VENUE,))
    assert state.phase is SyncPhase.SUCCESS
    assert state.status is SyncStatus.IDLE
    assert state.venues == (VENUE,)


def test_failure_drops_venues_and_sets_error():
    shown = complete_success(INITIAL_STATE, (VENUE,))
    state = complete_failure(begin_loading(shown, 2), "Failed to load venue data: 504")
    assert state.phase is SyncPhase.FAILURE
    assert state.status is SyncStatus.IDLE
    assert state.venues == ()
    assert state.error == "Failed to load venue data: 504"


def test_reset_keeps_generation_only():
    state = reset(7)
    assert state.phase is SyncPhase.IDLE
    assert state.generation == 7
    assert state.venues == ()
