"""
Single-flight coordinator for viewport venue fetches.

One coordinator belongs to one map session. It owns the SyncState, runs at
most one Overpass request at a time and drops (does not queue) any request
that arrives while one is outstanding. Every accepted request carries a
generation token; results coming back under a stale token are discarded.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional

from domain.models import Bounds
from services.overpass_client import VenueFetchError, get_default_overpass_client
from services.overpass_query import build_interpreter_url
from services.overpass_types import RawGeoElement
from services.sync_state import (
    INITIAL_STATE,
    SyncState,
    begin_loading,
    complete_failure,
    complete_success,
    reset,
)
from services.venue_normalizer import normalize_elements

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[List[RawGeoElement]]]
StateListener = Callable[[SyncState], None]

ERROR_PREFIX = "Failed to load venue data"


def describe_failure(exc: BaseException) -> str:
    detail = str(exc).strip() or exc.__class__.__name__
    return f"{ERROR_PREFIX}: {detail}"


class FetchCoordinator:
    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        interpreter_url: Optional[str] = None,
    ):
        self._fetch: Fetcher = fetcher or get_default_overpass_client().fetch_elements_async
        self.interpreter_url = interpreter_url
        self._state: SyncState = INITIAL_STATE
        self._generation = 0
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> SyncState:
        return self._state

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register a state listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _set_state(self, state: SyncState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Sync state listener failed")

    def _finish(self, token: int, state: SyncState) -> bool:
        if token != self._generation:
            logger.debug("Discarding result of stale fetch generation=%d (current=%d)", token, self._generation)
            return False
        self._set_state(state)
        return True

    def invalidate(self) -> None:
        """Forget the current session's data; any fetch still in flight becomes stale."""
        self._generation += 1
        self._set_state(reset(self._generation))

    async def request_sync(self, bounds: Bounds) -> bool:
        """
        Fetch venues for `bounds` unless a fetch is already running.

        Returns True when the request was accepted, False when it was dropped.
        The coordinator is never left in LOADING once this returns or is
        cancelled.
        """
        if self._state.is_loading:
            logger.debug("Dropping venue sync for %s: fetch already in flight", bounds.as_overpass_bbox())
            return False

        self._generation += 1
        token = self._generation
        self._set_state(begin_loading(self._state, token))
        url = build_interpreter_url(bounds, base_url=self.interpreter_url)
        logger.info("Fetching venues for bbox=%s generation=%d", bounds.as_overpass_bbox(), token)

        try:
            raw_elements = await self._fetch(url)
            venues = normalize_elements(raw_elements)
        except VenueFetchError as exc:
            logger.warning("Venue fetch failed for bbox=%s: %s", bounds.as_overpass_bbox(), exc)
            self._finish(token, complete_failure(self._state, describe_failure(exc)))
        except Exception as exc:
            logger.exception("Unexpected error during venue fetch for bbox=%s", bounds.as_overpass_bbox())
            self._finish(token, complete_failure(self._state, describe_failure(exc)))
        else:
            logger.info(
                "Venue fetch generation=%d: %d raw elements, %d venues",
                token,
                len(raw_elements),
                len(venues),
            )
            self._finish(token, complete_success(self._state, tuple(venues)))
        finally:
            # Cancellation skips the branches above.
            if self._state.is_loading and self._state.generation == token:
                self._finish(token, complete_failure(self._state, f"{ERROR_PREFIX}: request cancelled"))
        return True
