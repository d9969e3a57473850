"""
Informational content routes.
"""
from typing import List

from fastapi import APIRouter
from pydantic import BaseModel

from services.info_pages import (
    HOME_HEADING,
    HOME_PARAGRAPHS,
    NAV_SECTIONS,
    SITE_DESCRIPTION,
    SITE_TITLE,
)

router = APIRouter()


class NavSectionResponse(BaseModel):
    slug: str
    label: str
    path: str


class SiteInfoResponse(BaseModel):
    title: str
    description: str
    navigation: List[NavSectionResponse]
    home_heading: str
    home_paragraphs: List[str]


@router.get("", response_model=SiteInfoResponse)
async def site_info():
    return SiteInfoResponse(
        title=SITE_TITLE,
        description=SITE_DESCRIPTION,
        navigation=[NavSectionResponse(slug=s.slug, label=s.label, path=s.path) for s in NAV_SECTIONS],
        home_heading=HOME_HEADING,
        home_paragraphs=list(HOME_PARAGRAPHS),
    )
