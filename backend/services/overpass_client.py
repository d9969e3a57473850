"""
Thin Overpass API client with shared session and headers.

Only transport and decoding live here; turning elements into venues is the
normalizer's job.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional

import requests
from pydantic import ValidationError

from services.overpass_types import RawGeoElement
from settings import settings

logger = logging.getLogger(__name__)
_session = requests.Session()

FALLBACK_UA = "accessible-venues-map/0.1 (contact: example@example.com)"
if settings.OVERPASS_USER_AGENT is None:
    logger.warning(
        "OVERPASS_USER_AGENT not set in environment; using fallback UA. "
        "Public Overpass instances may throttle anonymous clients."
    )

OVERPASS_HEADERS = {
    "User-Agent": settings.OVERPASS_USER_AGENT or FALLBACK_UA,
    "Accept": "application/json",
}


class VenueFetchError(Exception):
    """Base class for anything that prevents a venue fetch from producing data."""


class OverpassRequestError(VenueFetchError):
    """Non-2xx status or transport failure."""


class OverpassParseError(VenueFetchError):
    """The response body is not the JSON document we asked for."""


def parse_overpass_payload(payload: Any) -> List[RawGeoElement]:
    """
    Validate the decoded response body and return its elements.

    A body without an `elements` list is a parse failure. Individual
    elements that don't validate are skipped so one odd record doesn't
    blank the whole map.
    """
    if not isinstance(payload, dict):
        raise OverpassParseError("response body is not a JSON object")
    raw_elements = payload.get("elements")
    if not isinstance(raw_elements, list):
        raise OverpassParseError("response body has no 'elements' list")

    elements: List[RawGeoElement] = []
    for index, item in enumerate(raw_elements):
        try:
            elements.append(RawGeoElement.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping invalid Overpass element #%d: %s", index, exc.errors()[:1])
    return elements


class OverpassClient:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.session = session or _session
        self.timeout = timeout if timeout is not None else settings.OVERPASS_HTTP_TIMEOUT_SECONDS
        self.logger = logging.getLogger(__name__)

    def fetch_elements(self, url: str) -> List[RawGeoElement]:
        """Blocking GET of an interpreter URL; raises VenueFetchError subclasses."""
        try:
            resp = self.session.get(url, headers=OVERPASS_HEADERS, timeout=self.timeout)
        except requests.RequestException as exc:
            raise OverpassRequestError(str(exc) or exc.__class__.__name__) from exc

        if not resp.ok:
            reason = resp.reason or "HTTP error"
            raise OverpassRequestError(f"Overpass API request failed: {resp.status_code} {reason}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise OverpassParseError(f"invalid JSON in response: {exc}") from exc

        elements = parse_overpass_payload(payload)
        self.logger.debug("OverpassClient.fetch_elements: got %d elements", len(elements))
        return elements

    async def fetch_elements_async(self, url: str) -> List[RawGeoElement]:
        """Run the blocking fetch in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.fetch_elements, url)


_default_overpass_client: Optional[OverpassClient] = None


def get_default_overpass_client() -> OverpassClient:
    global _default_overpass_client
    if _default_overpass_client is None:
        _default_overpass_client = OverpassClient()
    return _default_overpass_client
