"""
Bind a map viewport's settle signal to a FetchCoordinator.

Activation syncs immediately with the current bounds; every later settle
goes through a trailing-edge debounce. The subscription returned by
`activate()` is the only handle on the wiring: closing it unsubscribes from
the signal and cancels the pending timer.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Protocol

from domain.models import Bounds
from services.debounce import DebounceTimer
from services.fetch_coordinator import FetchCoordinator
from settings import settings

logger = logging.getLogger(__name__)

SettleListener = Callable[[Bounds], None]


class ViewportSource(Protocol):
    @property
    def current_bounds(self) -> Bounds: ...

    def subscribe(self, listener: SettleListener) -> Callable[[], None]: ...


class ViewportSignal:
    """In-process settle signal, fed by whatever transport carries the map's events."""

    def __init__(self, initial_bounds: Bounds):
        self._bounds = initial_bounds
        self._listeners: List[SettleListener] = []

    @property
    def current_bounds(self) -> Bounds:
        return self._bounds

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: SettleListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def settle(self, bounds: Bounds) -> None:
        self._bounds = bounds
        for listener in list(self._listeners):
            listener(bounds)


class ViewportSubscription:
    def __init__(
        self,
        unsubscribe: Callable[[], None],
        timer: DebounceTimer,
        initial_sync: "asyncio.Task[bool]",
    ):
        self._unsubscribe = unsubscribe
        self._timer = timer
        self.initial_sync = initial_sync
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sync_pending(self) -> bool:
        return self._timer.pending

    def close(self) -> None:
        """Release the settle subscription and drop any pending debounced sync."""
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()
        self._timer.cancel()

    def __enter__(self) -> "ViewportSubscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False


class ViewportTracker:
    def __init__(self, coordinator: FetchCoordinator, delay: Optional[float] = None):
        self.coordinator = coordinator
        self.delay = delay if delay is not None else settings.SYNC_DEBOUNCE_SECONDS
        self._subscription: Optional[ViewportSubscription] = None

    @property
    def active(self) -> bool:
        return self._subscription is not None and not self._subscription.closed

    def activate(self, source: ViewportSource) -> ViewportSubscription:
        """Must be called from a running event loop."""
        if self.active:
            raise RuntimeError("ViewportTracker is already active")

        loop = asyncio.get_running_loop()
        timer = DebounceTimer(self.delay, self.coordinator.request_sync, loop=loop)
        initial_sync = loop.create_task(self.coordinator.request_sync(source.current_bounds))
        unsubscribe = source.subscribe(timer.schedule)
        logger.debug("Viewport tracker activated, debounce=%.3fs", self.delay)

        self._subscription = ViewportSubscription(unsubscribe, timer, initial_sync)
        return self._subscription
