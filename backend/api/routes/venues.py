"""
Venue API routes.

`GET /venues` syncs the given bounds on one coordinator shared by all callers.
`WS /ws/map` keeps a map session open: the browser reports viewport bounds
and gets every sync state change pushed back.
"""
import asyncio
import contextlib
import json
import logging
from typing import Any, Dict, List, Literal, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ConfigDict, ValidationError

from domain.models import Bounds
from services.fetch_coordinator import FetchCoordinator
from services.sync_state import SyncState
from services.venue_markers import VenueMarker, build_markers
from services.viewport_tracker import ViewportSignal, ViewportSubscription, ViewportTracker

router = APIRouter()
logger = logging.getLogger(__name__)


class BoundsSchema(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    south: float
    west: float
    north: float
    east: float

    def to_bounds(self) -> Bounds:
        return Bounds(south=self.south, west=self.west, north=self.north, east=self.east)


class ViewportMessage(BaseModel):
    type: Literal["viewport"]
    bounds: BoundsSchema


class MarkerIconResponse(BaseModel):
    html: str
    class_name: str
    size: Tuple[int, int]
    anchor: Tuple[int, int]
    popup_anchor: Tuple[int, int]


class VenuePopupResponse(BaseModel):
    display_name: str
    category: str
    accessibility: Optional[str] = None
    accessibility_description: Optional[str] = None
    has_ramp: bool
    has_accessible_toilet: bool
    elevator_likely: bool
    permalink: str


class VenueMarkerResponse(BaseModel):
    key: str
    lat: float
    lon: float
    icon: MarkerIconResponse
    popup: VenuePopupResponse


class SyncStateResponse(BaseModel):
    status: str
    phase: str
    venues: List[VenueMarkerResponse]
    error: Optional[str] = None


def marker_to_response(marker: VenueMarker) -> VenueMarkerResponse:
    icon = marker.icon
    popup = marker.popup
    return VenueMarkerResponse(
        key=marker.key,
        lat=marker.lat,
        lon=marker.lon,
        icon=MarkerIconResponse(
            html=icon.html,
            class_name=icon.class_name,
            size=icon.size,
            anchor=icon.anchor,
            popup_anchor=icon.popup_anchor,
        ),
        popup=VenuePopupResponse(
            display_name=popup.display_name,
            category=popup.category,
            accessibility=popup.accessibility,
            accessibility_description=popup.accessibility_description,
            has_ramp=popup.has_ramp,
            has_accessible_toilet=popup.has_accessible_toilet,
            elevator_likely=popup.elevator_likely,
            permalink=popup.permalink,
        ),
    )


def state_to_response(state: SyncState) -> SyncStateResponse:
    """Convert a SyncState to the payload the map page renders."""
    return SyncStateResponse(
        status=state.status.value,
        phase=state.phase.value,
        venues=[marker_to_response(m) for m in build_markers(state.venues)],
        error=state.error,
    )


def new_coordinator() -> FetchCoordinator:
    return FetchCoordinator()


_shared_coordinator: Optional[FetchCoordinator] = None


def get_shared_coordinator() -> FetchCoordinator:
    """Coordinator shared by all `GET /venues` callers so they share one in-flight fetch."""
    global _shared_coordinator
    if _shared_coordinator is None:
        _shared_coordinator = new_coordinator()
    return _shared_coordinator


@router.get("/venues", response_model=SyncStateResponse)
async def get_venues(
    south: float = Query(...),
    west: float = Query(...),
    north: float = Query(...),
    east: float = Query(...),
    coordinator: FetchCoordinator = Depends(get_shared_coordinator),
):
    """
    One-shot venue sync for a bounding box.

    A call arriving while another caller's fetch is running is dropped and
    gets the current snapshot (status `loading`). Upstream failures come
    back as `error` on a 200 response, the same way the map session
    reports them.
    """
    try:
        bounds = BoundsSchema(south=south, west=west, north=north, east=east).to_bounds()
    except ValidationError:
        raise HTTPException(status_code=422, detail="Bounds must be finite numbers")

    accepted = await coordinator.request_sync(bounds)
    if not accepted:
        logger.debug("GET /venues dropped for bbox=%s: fetch already in flight", bounds.as_overpass_bbox())
    return state_to_response(coordinator.state)


def _state_message(state: SyncState) -> Dict[str, Any]:
    return {"type": "state", **state_to_response(state).model_dump()}


async def _send_messages(websocket: WebSocket, outbox: "asyncio.Queue[Dict[str, Any]]") -> None:
    while True:
        message = await outbox.get()
        await websocket.send_json(message)


async def _stop_sender(sender: "asyncio.Task[None]") -> None:
    """Cancel the push task and collect whatever it ended with."""
    sender.cancel()
    try:
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect):
            await sender
    except Exception:
        logger.exception("Map session sender failed")


async def _receive_text(websocket: WebSocket) -> Optional[str]:
    """Next text frame, or None for a binary frame."""
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))
    return message.get("text")


@router.websocket("/ws/map")
async def map_session(websocket: WebSocket):
    """
    Map session.

    The first viewport message activates the session and syncs at once;
    every later one counts as a settle event and is debounced.
    """
    await websocket.accept()
    coordinator = new_coordinator()
    tracker = ViewportTracker(coordinator)
    outbox: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()
    remove_listener = coordinator.add_listener(lambda state: outbox.put_nowait(_state_message(state)))
    sender = asyncio.create_task(_send_messages(websocket, outbox))
    signal: Optional[ViewportSignal] = None
    subscription: Optional[ViewportSubscription] = None

    try:
        while True:
            text = await _receive_text(websocket)
            if text is None:
                outbox.put_nowait({"type": "error", "detail": "Invalid message: expected a text frame"})
                continue
            try:
                message = ViewportMessage.model_validate(json.loads(text))
            except (ValueError, ValidationError) as exc:
                outbox.put_nowait({"type": "error", "detail": f"Invalid message: {exc}"})
                continue

            bounds = message.bounds.to_bounds()
            if subscription is None:
                signal = ViewportSignal(bounds)
                subscription = tracker.activate(signal)
            else:
                signal.settle(bounds)
    except WebSocketDisconnect:
        logger.info("Map session disconnected")
    finally:
        if subscription is not None:
            subscription.close()
        remove_listener()
        coordinator.invalidate()
        await _stop_sender(sender)
