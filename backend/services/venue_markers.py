"""
Marker and popup payloads handed to the clustering map widget.

The widget does the clustering and drawing; this module only guarantees
stable keys, finite coordinates and the popup fields.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from domain.models import Venue
from settings import settings

UNNAMED_VENUE = "Unnamed Venue"
NO_CATEGORY = "N/A"
CATEGORY_TAG_PRIORITY = ("amenity", "shop", "tourism", "leisure")


@dataclass(frozen=True)
class MarkerIcon:
    html: str
    class_name: str
    size: Tuple[int, int]
    anchor: Tuple[int, int]
    popup_anchor: Tuple[int, int]


WHEELCHAIR_ICON = MarkerIcon(
    html='<span style="font-size: 1.5em; color: blue;">♿</span>',
    class_name="bg-transparent border-0",
    size=(24, 24),
    anchor=(12, 24),
    popup_anchor=(0, -24),
)


@dataclass(frozen=True)
class VenuePopup:
    display_name: str
    category: str
    accessibility: Optional[str]
    accessibility_description: Optional[str]
    has_ramp: bool
    has_accessible_toilet: bool
    elevator_likely: bool  # guessed from building:levels only
    permalink: str


@dataclass(frozen=True)
class VenueMarker:
    key: str
    lat: float
    lon: float
    icon: MarkerIcon
    popup: VenuePopup


def venue_category(tags: Dict[str, str]) -> str:
    for tag in CATEGORY_TAG_PRIORITY:
        if tags.get(tag):
            return tags[tag]
    return NO_CATEGORY


def venue_permalink(venue: Venue, base_url: Optional[str] = None) -> str:
    base = (base_url or settings.OSM_BASE_URL).rstrip("/")
    return f"{base}/{venue.kind.value}/{venue.id}"


def build_popup(venue: Venue, base_url: Optional[str] = None) -> VenuePopup:
    tags = venue.tags
    return VenuePopup(
        display_name=tags.get("name") or UNNAMED_VENUE,
        category=venue_category(tags),
        accessibility=tags.get("wheelchair"),
        accessibility_description=tags.get("wheelchair:description") or None,
        has_ramp=tags.get("ramp:wheelchair") == "yes",
        has_accessible_toilet=tags.get("toilets:wheelchair") == "yes",
        elevator_likely=bool(tags.get("building:levels")),
        permalink=venue_permalink(venue, base_url),
    )


def build_marker(venue: Venue, base_url: Optional[str] = None) -> VenueMarker:
    if not (math.isfinite(venue.lat) and math.isfinite(venue.lon)):
        raise ValueError(f"venue {venue.key} has non-finite coordinates")
    return VenueMarker(
        key=venue.key,
        lat=venue.lat,
        lon=venue.lon,
        icon=WHEELCHAIR_ICON,
        popup=build_popup(venue, base_url),
    )


def build_markers(venues: Sequence[Venue], base_url: Optional[str] = None) -> List[VenueMarker]:
    """Markers for every venue with usable coordinates, in venue order."""
    return [
        build_marker(v, base_url)
        for v in venues
        if math.isfinite(v.lat) and math.isfinite(v.lon)
    ]
