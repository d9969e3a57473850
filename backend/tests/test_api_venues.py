import asyncio
import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import venues as venues_router
from conftest import RecordingFetcher
from services.fetch_coordinator import FetchCoordinator
from services.overpass_client import OverpassRequestError
from settings import settings

BOUNDS = {"south": 51.49, "west": -0.12, "north": 51.52, "east": -0.06}


def _client(monkeypatch, fetcher: RecordingFetcher) -> TestClient:
    monkeypatch.setattr(venues_router, "new_coordinator", lambda: FetchCoordinator(fetcher=fetcher))
    app = FastAPI()
    app.include_router(venues_router.router)
    app.dependency_overrides[venues_router.get_shared_coordinator] = lambda: FetchCoordinator(fetcher=fetcher)
    return TestClient(app)


def test_get_venues_returns_markers(monkeypatch, cafe_node, museum_way):
    fetcher = RecordingFetcher(elements=[cafe_node, museum_way, {"type": "node", "id": 3, "tags": {}}])
    client = _client(monkeypatch, fetcher)

    resp = client.get("/venues", params=BOUNDS)

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "idle"
    assert data["phase"] == "success"
    assert data["error"] is None
    assert [v["key"] for v in data["venues"]] == ["node-101", "way-202"]
    cafe = data["venues"][0]
    assert cafe["lat"] == 51.5074
    assert cafe["popup"]["display_name"] == "Step Free Cafe"
    assert cafe["popup"]["category"] == "cafe"
    assert cafe["popup"]["permalink"] == "https://www.openstreetmap.org/node/101"
    assert cafe["icon"]["size"] == [24, 24]
    assert len(fetcher.urls) == 1


def test_get_venues_reports_upstream_failure(monkeypatch):
    fetcher = RecordingFetcher(error=OverpassRequestError("Overpass API request failed: 504 Gateway Timeout"))
    client = _client(monkeypatch, fetcher)

    resp = client.get("/venues", params=BOUNDS)

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "idle"
    assert data["venues"] == []
    assert "504" in data["error"]


def test_get_venues_rejects_bad_bounds(monkeypatch):
    fetcher = RecordingFetcher()
    client = _client(monkeypatch, fetcher)

    assert client.get("/venues", params={**BOUNDS, "north": "nan"}).status_code == 422
    assert client.get("/venues", params={"south": 1.0}).status_code == 422
    assert fetcher.urls == []


def test_map_session_pushes_state_changes(monkeypatch, cafe_node):
    monkeypatch.setattr(settings, "SYNC_DEBOUNCE_SECONDS", 0.01)
    fetcher = RecordingFetcher(elements=[cafe_node])
    client = _client(monkeypatch, fetcher)

    with client.websocket_connect("/ws/map") as ws:
        ws.send_json({"type": "viewport", "bounds": BOUNDS})
        loading = ws.receive_json()
        assert loading["type"] == "state"
        assert loading["status"] == "loading"
        loaded = ws.receive_json()
        assert loaded["status"] == "idle"
        assert [v["key"] for v in loaded["venues"]] == ["node-101"]

        ws.send_text("not json")
        error = ws.receive_json()
        assert error["type"] == "error"

        ws.send_json({"type": "viewport", "bounds": {**BOUNDS, "north": 51.6}})
        assert ws.receive_json()["status"] == "loading"
        assert ws.receive_json()["status"] == "idle"

    assert len(fetcher.urls) == 2
    assert "51.6" in fetcher.urls[1]


def test_map_session_answers_binary_frame_with_error(monkeypatch, cafe_node):
    fetcher = RecordingFetcher(elements=[cafe_node])
    client = _client(monkeypatch, fetcher)

    with client.websocket_connect("/ws/map") as ws:
        ws.send_bytes(b'{"type": "viewport"}')
        error = ws.receive_json()
        assert error["type"] == "error"
        assert "text frame" in error["detail"]

        # the session survives and still syncs
        ws.send_json({"type": "viewport", "bounds": BOUNDS})
        assert ws.receive_json()["status"] == "loading"
        assert ws.receive_json()["status"] == "idle"

    assert len(fetcher.urls) == 1


class SlowFetcher:
    """Sleeps inside the fetch and records how many calls overlap."""

    def __init__(self, delay: float = 0.05):
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls = 0

    async def __call__(self, url):
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        return []


def test_concurrent_get_venues_share_one_fetch(monkeypatch):
    fetcher = SlowFetcher()
    monkeypatch.setattr(venues_router, "_shared_coordinator", FetchCoordinator(fetcher=fetcher))

    async def scenario():
        coordinator = venues_router.get_shared_coordinator()
        return await asyncio.gather(
            *(venues_router.get_venues(**BOUNDS, coordinator=coordinator) for _ in range(5))
        )

    responses = asyncio.run(scenario())

    assert fetcher.calls == 1
    assert fetcher.max_in_flight == 1
    assert [r.status for r in responses].count("loading") == 4
    assert responses[0].status == "idle"


def test_shared_coordinator_is_reused(monkeypatch):
    monkeypatch.setattr(venues_router, "_shared_coordinator", None)
    monkeypatch.setattr(venues_router, "new_coordinator", lambda: FetchCoordinator(fetcher=RecordingFetcher()))
    assert venues_router.get_shared_coordinator() is venues_router.get_shared_coordinator()


def test_stop_sender_collects_failed_task(caplog):
    async def failing_send():
        raise RuntimeError("socket gone")

    async def scenario():
        task = asyncio.create_task(failing_send())
        await asyncio.sleep(0)
        await venues_router._stop_sender(task)
        return task

    with caplog.at_level(logging.ERROR, logger=venues_router.logger.name):
        task = asyncio.run(scenario())

    assert task.done()
    assert "Map session sender failed" in caplog.text


def test_stop_sender_cancels_running_task():
    async def scenario():
        task = asyncio.create_task(asyncio.sleep(10))
        await asyncio.sleep(0)
        await venues_router._stop_sender(task)
        return task

    assert asyncio.run(scenario()).cancelled()
