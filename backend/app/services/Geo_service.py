import httpx
import logging
from typing import List, Optional

from app.core.config import settings
from app.core.errors import OverpassError
from app.core.logger import logs
from app.core.overpass_connection import overpass_connection
from app.models.places_model import BoundingBox, PlaceEntry
from app.repos.result_cache import ResultCache
from app.services import query_builder
from app.services.county_bounds import lookup_county_bounds
from app.services.place_normalizer import aggregate_bounds, dedupe_places, elements_to_places
from app.services.rate_gate import RateGate
from app.services.retry_executor import RetryExecutor


def _county_key(county_name: str) -> str:
    return county_name.strip().lower()


class GeoResolver:
    """
    Resolves Irish county bounds and the places inside a county via Overpass.

    Callers only ever get plain data back: provider failures are logged and
    turned into an empty list (or None for bounds).
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        rate_gate: RateGate = None,
        cache: ResultCache = None,
        executor: RetryExecutor = None,
    ):
        self.rate_gate = rate_gate if rate_gate is not None else RateGate()
        self.cache = cache if cache is not None else ResultCache()
        self.executor = executor if executor is not None else RetryExecutor(client, self.rate_gate)
        self.min_area_results = settings.MIN_AREA_RESULTS

    # ===== County bounds =====

    async def resolve_county_bounds(self, county_name: str) -> Optional[BoundingBox]:
        county = county_name.strip()
        if not county:
            return None
        key = _county_key(county)
        cache_key = f"county_bounds_{key}"

        cached = self.cache.get(cache_key)
        if cached:
            return cached

        # Try hardcoded bounds first for Irish counties
        hardcoded = lookup_county_bounds(key)
        if hardcoded:
            self.cache.set(cache_key, hardcoded, settings.BOUNDS_CACHE_TTL_MINUTES)
            return hardcoded

        logs.log(logging.INFO, f"No hardcoded bounds for {county}, resolving boundary from Overpass")
        try:
            data = await self.executor.execute(query_builder.build_county_area_resolution_query(county))
        except OverpassError as e:
            logs.log(logging.ERROR, f"Error fetching county bounds for {county}: {str(e)}")
            return None

        elements = data.get("elements") or []
        if not elements:
            logs.log(logging.WARNING, f"No area found for county: {county}")
            return None

        bounds = aggregate_bounds(elements)
        if bounds is None:
            logs.log(logging.WARNING, f"No valid bounds found for county: {county}")
            return None

        self.cache.set(cache_key, bounds, settings.BOUNDS_CACHE_TTL_MINUTES)
        return bounds

    # ===== Places =====

    async def _fetch_places(self, query: str) -> List[PlaceEntry]:
        data = await self.executor.execute(query)
        return elements_to_places(data.get("elements") or [])

    async def list_places_in_county(self, county_name: str) -> List[PlaceEntry]:
        county = county_name.strip()
        if not county:
            return []
        cache_key = f"towns_{_county_key(county)}"

        cached = self.cache.get(cache_key)
        if cached is not None:
            logs.log(logging.INFO, f"✓ Towns cache HIT for {county}")
            return list(cached)

        logs.log(logging.INFO, f"✗ Towns cache MISS for {county}. Fetching from Overpass API...")
        try:
            places = await self._fetch_places(query_builder.build_area_query(county))

            # Named areas are precise but sometimes sparse; a bounding box also
            # catches settlements the boundary relation misses
            if len(places) < self.min_area_results:
                logs.log(logging.INFO, f"Area query returned {len(places)} places for {county}, trying bbox fallback")
                bounds = await self.resolve_county_bounds(county)
                if bounds:
                    bbox_places = await self._fetch_places(query_builder.build_bounding_box_query(bounds, county))
                    if len(bbox_places) > len(places):
                        places = bbox_places
        except OverpassError as e:
            logs.log(logging.ERROR, f"Error fetching towns for {county}: {str(e)}")
            return []

        towns = sorted(dedupe_places(places), key=lambda p: p.name.casefold())
        self.cache.set(cache_key, towns, settings.TOWNS_CACHE_TTL_MINUTES)
        logs.log(logging.INFO, f"Total places for {county}: {len(towns)}")
        return list(towns)

    async def search_places_in_county(self, county_name: str, text: str) -> List[PlaceEntry]:
        county = county_name.strip()
        text = (text or "").strip()
        if not county or not text:
            return []

        key = _county_key(county)
        cache_key = f"search_{key}_{text.lower()}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return list(cached)

        # A full listing for the county is already cached: filter it locally
        towns = self.cache.get(f"towns_{key}")
        if towns is not None:
            needle = text.lower()
            filtered = [town for town in towns if needle in town.name.lower()]
            self.cache.set(cache_key, filtered, settings.SEARCH_CACHE_TTL_MINUTES)
            return list(filtered)

        bounds = await self.resolve_county_bounds(county)
        if not bounds:
            return []

        try:
            results = await self._fetch_places(query_builder.build_search_query(bounds, text))
        except OverpassError as e:
            logs.log(logging.ERROR, f"Error searching places in {county}: {str(e)}")
            return []

        deduped = dedupe_places(results)
        self.cache.set(cache_key, deduped, settings.SEARCH_CACHE_TTL_MINUTES)
        return list(deduped)


_default_geo_resolver: Optional[GeoResolver] = None


def get_default_geo_resolver() -> GeoResolver:
    """Process-wide resolver bound to the shared Overpass HTTP client."""
    global _default_geo_resolver
    if _default_geo_resolver is None:
        _default_geo_resolver = GeoResolver(overpass_connection.get_client())
    elif _default_geo_resolver.executor.client.is_closed:
        # Keep the gate timestamp and cached results, swap in a live client
        _default_geo_resolver.executor.client = overpass_connection.get_client()
    return _default_geo_resolver
