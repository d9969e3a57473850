"""
Core domain models for the accessible venues map.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class ElementKind(str, Enum):
    """Geometry kind of an OpenStreetMap element."""
    NODE = "node"
    WAY = "way"
    RELATION = "relation"


@dataclass(frozen=True)
class Bounds:
    """
    Map viewport bounds in degrees.

    The map widget is trusted to supply south < north and west < east;
    nothing here re-checks it.
    """
    south: float
    west: float
    north: float
    east: float

    def as_overpass_bbox(self) -> str:
        """Bounding box in Overpass order: south,west,north,east."""
        return f"{self.south},{self.west},{self.north},{self.east}"


@dataclass(frozen=True)
class Venue:
    """
    An accessibility-tagged venue ready to be placed on the map.

    Two venues with the same (kind, id) are the same entity; whichever
    fetch came last wins.
    """
    id: int
    kind: ElementKind
    lat: float
    lon: float
    tags: Dict[str, str] = field(default_factory=dict)

    def __hash__(self) -> int:
        # tags is a dict; identity is (kind, id) anyway.
        return hash((self.kind, self.id))

    @property
    def key(self) -> str:
        """Stable marker key, e.g. 'way-1234'."""
        return f"{self.kind.value}-{self.id}"
