"""
Overpass QL query construction for the accessible venues layer.

Everything here is pure: the same bounds always give the same query text.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import quote, urlencode

from domain.models import Bounds
from settings import settings

ACCESSIBILITY_TAG = "wheelchair"
ACCESSIBILITY_VALUES = ("yes", "limited")
CATEGORY_TAGS = ("amenity", "shop", "tourism", "leisure", "office", "public_transport")
ELEMENT_KINDS = ("node", "way", "relation")


def _category_condition() -> str:
    return " || ".join(f't["{tag}"]' for tag in CATEGORY_TAGS)


def build_overpass_query(bounds: Bounds, timeout_seconds: Optional[int] = None) -> str:
    """
    Build the Overpass QL query for accessible venues inside `bounds`.

    One statement per element kind, all sharing the same filters:
    - wheelchair tag matching yes|limited
    - at least one of the category tags present
    `out center` makes the service return a centroid for ways and relations.
    """
    timeout = timeout_seconds if timeout_seconds is not None else settings.OVERPASS_QUERY_TIMEOUT_SECONDS
    bbox = bounds.as_overpass_bbox()
    accessibility = "|".join(ACCESSIBILITY_VALUES)
    condition = _category_condition()
    statements = "\n".join(
        f'  {kind}["{ACCESSIBILITY_TAG}"~"{accessibility}"](if:{condition})({bbox});'
        for kind in ELEMENT_KINDS
    )
    return f"[out:json][timeout:{timeout}];\n(\n{statements}\n);\nout center;\n"


def build_interpreter_url(
    bounds: Bounds,
    base_url: Optional[str] = None,
    timeout_seconds: Optional[int] = None,
) -> str:
    """Full GET target for the interpreter endpoint, query URL-encoded in `data`."""
    base = (base_url or settings.OVERPASS_INTERPRETER_URL).rstrip("?")
    query = build_overpass_query(bounds, timeout_seconds=timeout_seconds)
    return f"{base}?{urlencode({'data': query}, quote_via=quote)}"
