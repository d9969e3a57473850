"""
Turn heterogeneous Overpass elements into uniform Venue records.

Nodes carry lat/lon directly, ways and relations only a centroid, and some
elements carry neither. Coordinates that end up exactly at (0.0, 0.0) are
treated as missing and the element is dropped.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from domain.models import Venue
from services.overpass_types import RawGeoElement

MISSING_COORDINATE = 0.0


def _pick_coordinate(direct: Optional[float], from_centroid: Optional[float]) -> float:
    if direct is not None:
        return direct
    if from_centroid is not None:
        return from_centroid
    return MISSING_COORDINATE


def element_to_venue(element: RawGeoElement) -> Venue:
    centroid = element.centroid
    lat = _pick_coordinate(element.lat, centroid.lat if centroid else None)
    lon = _pick_coordinate(element.lon, centroid.lon if centroid else None)
    return Venue(
        id=element.id,
        kind=element.kind,
        lat=lat,
        lon=lon,
        tags=dict(element.tags),
    )


def has_location(venue: Venue) -> bool:
    """False when the venue sits exactly on the origin, which stands in for 'no geometry'."""
    return not (venue.lat == MISSING_COORDINATE and venue.lon == MISSING_COORDINATE)


def normalize_elements(raw_elements: Iterable[RawGeoElement]) -> List[Venue]:
    """
    Normalize elements in input order.

    Duplicate (kind, id) keys inside one response are all kept; the map
    renderer decides what to do with them.
    """
    venues = (element_to_venue(el) for el in raw_elements)
    return [v for v in venues if has_location(v)]
