from pydantic import BaseModel, model_validator
from typing import List, Optional
from enum import Enum

# --- Enums ---
class PlaceKind(str, Enum):
    SETTLEMENT = "settlement"
    NATURAL_FEATURE = "natural-feature"
    ATTRACTION = "attraction"

# --- Domain Models ---
class PlaceEntry(BaseModel):
    external_id: int
    name: str
    place_type: str = "locality"  # raw provider tag value, e.g. "village", "beach"
    kind: PlaceKind = PlaceKind.SETTLEMENT
    lat: float
    lon: float

class BoundingBox(BaseModel):
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @model_validator(mode="after")
    def check_ordering(self):
        if self.min_lat > self.max_lat:
            raise ValueError(f"min_lat {self.min_lat} is greater than max_lat {self.max_lat}")
        if self.min_lon > self.max_lon:
            raise ValueError(f"min_lon {self.min_lon} is greater than max_lon {self.max_lon}")
        return self

# --- API Response Models ---
class Locality(BaseModel):
    id: str  # "osm_<external_id>"
    name: str
    place_type: str
    kind: PlaceKind
    lat: float
    lon: float

    @classmethod
    def from_place(cls, place: PlaceEntry) -> "Locality":
        return cls(
            id=f"osm_{place.external_id}",
            name=place.name,
            place_type=place.place_type,
            kind=place.kind,
            lat=place.lat,
            lon=place.lon,
        )

class LocalityFetchResponse(BaseModel):
    success: bool = True
    county: str
    localities: List[Locality]
    count: int

class LocalitySearchResponse(BaseModel):
    success: bool = True
    county: str
    localities: List[Locality]
    total: int
    has_query: bool

class CountyBoundsResponse(BaseModel):
    success: bool = True
    county: str
    bounds: Optional[BoundingBox] = None
