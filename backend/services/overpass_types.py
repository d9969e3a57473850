from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from domain.models import ElementKind


class Centroid(BaseModel):
    lat: float
    lon: float


class RawGeoElement(BaseModel):
    """One entry of the Overpass `elements` array as it arrives on the wire."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: ElementKind = Field(alias="type")
    id: int
    lat: Optional[float] = None  # nodes
    lon: Optional[float] = None  # nodes
    centroid: Optional[Centroid] = Field(default=None, alias="center")  # ways/relations with `out center`
    tags: Dict[str, str] = Field(default_factory=dict)
