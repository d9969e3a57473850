"""
Explicit state machine for viewport venue syncs.

Transitions are plain functions over an immutable SyncState so they can be
exercised without a coordinator, a network or a view.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from domain.models import Venue


class SyncPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


class SyncStatus(str, Enum):
    """The coarse idle/loading view the UI shows."""
    IDLE = "idle"
    LOADING = "loading"


@dataclass(frozen=True)
class SyncState:
    phase: SyncPhase = SyncPhase.IDLE
    venues: Tuple[Venue, ...] = ()
    error: Optional[str] = None
    # Token of the fetch that owns the LOADING phase.
    generation: int = 0

    @property
    def status(self) -> SyncStatus:
        return SyncStatus.LOADING if self.phase is SyncPhase.LOADING else SyncStatus.IDLE

    @property
    def is_loading(self) -> bool:
        return self.phase is SyncPhase.LOADING


INITIAL_STATE = SyncState()


def begin_loading(state: SyncState, generation: int) -> SyncState:
    """Enter LOADING. The previous venues stay visible until replaced."""
    return replace(state, phase=SyncPhase.LOADING, error=None, generation=generation)


def complete_success(state: SyncState, venues: Tuple[Venue, ...]) -> SyncState:
    return replace(state, phase=SyncPhase.SUCCESS, venues=tuple(venues), error=None)


def complete_failure(state: SyncState, message: str) -> SyncState:
    """Failures drop the venue set rather than keep stale markers around."""
    return replace(state, phase=SyncPhase.FAILURE, venues=(), error=message)


def reset(generation: int) -> SyncState:
    return SyncState(generation=generation)
