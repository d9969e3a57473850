import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from domain.models import Bounds  # noqa: E402
from services.overpass_types import RawGeoElement  # noqa: E402


class RecordingFetcher:
    """Async stand-in for OverpassClient.fetch_elements_async."""

    def __init__(
        self,
        elements: Optional[List[dict]] = None,
        error: Optional[BaseException] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.elements = elements or []
        self.error = error
        self.gate = gate
        self.urls: List[str] = []

    async def __call__(self, url: str) -> List[RawGeoElement]:
        self.urls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return [RawGeoElement.model_validate(e) for e in self.elements]


@pytest.fixture
def london_bounds() -> Bounds:
    return Bounds(south=51.49, west=-0.12, north=51.52, east=-0.06)


@pytest.fixture
def cafe_node() -> dict:
    return {
        "type": "node",
        "id": 101,
        "lat": 51.5074,
        "lon": -0.0901,
        "tags": {"name": "Step Free Cafe", "amenity": "cafe", "wheelchair": "yes"},
    }


@pytest.fixture
def museum_way() -> dict:
    return {
        "type": "way",
        "id": 202,
        "center": {"lat": 51.5194, "lon": -0.1270},
        "tags": {"name": "Museum", "tourism": "museum", "wheelchair": "limited"},
    }
