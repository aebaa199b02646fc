from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.models.places_model import (
    CountyBoundsResponse,
    Locality,
    LocalityFetchResponse,
    LocalitySearchResponse,
)
from app.services.Geo_service import GeoResolver, get_default_geo_resolver
from app.core.config import settings
from app.core.logger import logs

router = APIRouter()

# --- Dependency Injection ---
def get_geo_resolver() -> GeoResolver:
    return get_default_geo_resolver()

@router.get("/localities/fetch/{county}", response_model=LocalityFetchResponse)
async def fetch_localities_endpoint(
    county: str,
    resolver: GeoResolver = Depends(get_geo_resolver)
):
    county = county.strip()
    if len(county) < 2:
        raise HTTPException(status_code=400, detail="Valid county name is required")

    logs.log(20, f"Fetching localities from OSM for county: {county}")
    towns = await resolver.list_places_in_county(county)
    return LocalityFetchResponse(
        county=county,
        localities=[Locality.from_place(t) for t in towns],
        count=len(towns)
    )

@router.get("/localities/search", response_model=LocalitySearchResponse)
async def search_localities_endpoint(
    county: str = Query("", description="County name, e.g. 'wicklow'"),
    q: str = Query("", description="Text to match against locality names"),
    limit: Optional[int] = Query(settings.INITIAL_LOCALITY_LIMIT, ge=1, description="Cap on the initial (no query) listing"),
    resolver: GeoResolver = Depends(get_geo_resolver)
):
    county = county.strip()
    if not county:
        raise HTTPException(status_code=400, detail="County is required")

    query = q.strip()
    has_query = len(query) >= settings.MIN_SEARCH_TEXT_LENGTH
    if has_query:
        localities = await resolver.search_places_in_county(county, query)
    else:
        # Initial dropdown load: the whole county, optionally truncated
        localities = await resolver.list_places_in_county(county)
        if limit is not None:
            localities = localities[:limit]

    return LocalitySearchResponse(
        county=county,
        localities=[Locality.from_place(loc) for loc in localities],
        total=len(localities),
        has_query=has_query
    )

@router.get("/counties/{county}/bounds", response_model=CountyBoundsResponse)
async def county_bounds_endpoint(
    county: str,
    resolver: GeoResolver = Depends(get_geo_resolver)
):
    bounds = await resolver.resolve_county_bounds(county)
    if bounds is None:
        raise HTTPException(status_code=404, detail=f"No bounds found for county '{county.strip()}'")
    return CountyBoundsResponse(county=county.strip(), bounds=bounds)
