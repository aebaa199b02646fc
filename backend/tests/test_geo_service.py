import httpx
import pytest

from app.core.overpass_connection import OverpassConnection
from app.models.places_model import BoundingBox
from app.repos.result_cache import ResultCache
from app.services import Geo_service
from app.services.Geo_service import GeoResolver
from app.services.rate_gate import RateGate
from app.services.county_bounds import IRISH_COUNTY_BOUNDS

from conftest import OVERPASS_URL, node, overpass_query

ANTRIM_BOUNDS = {"minlat": 53.0, "maxlat": 53.5, "minlon": -7.0, "maxlon": -6.5}


def _towns(count: int, prefix: str) -> list[dict]:
    return [node(i, f"{prefix} {i:02d}") for i in range(1, count + 1)]


def _by_strategy(area_elements: list[dict], bbox_elements: list[dict]):
    """Answers area queries and bounding-box queries with different element sets."""
    def handler(request: httpx.Request) -> httpx.Response:
        query = overpass_query(request)
        elements = area_elements if "area.county_area" in query else bbox_elements
        return httpx.Response(200, json={"elements": elements})
    return handler


# ===== construction =====

@pytest.mark.asyncio
async def test_injected_empty_state_is_used_as_given(http_client):
    cache = ResultCache()
    gate = RateGate(min_interval_ms=0)

    resolver = GeoResolver(http_client, rate_gate=gate, cache=cache)

    assert resolver.cache is cache
    assert resolver.rate_gate is gate
    assert resolver.executor.rate_gate is gate


@pytest.mark.asyncio
async def test_default_resolver_keeps_its_state_when_the_client_is_reopened(monkeypatch):
    connection = OverpassConnection()
    monkeypatch.setattr(Geo_service, "overpass_connection", connection)
    monkeypatch.setattr(Geo_service, "_default_geo_resolver", None)

    first = Geo_service.get_default_geo_resolver()
    first.cache.set("towns_wicklow", [], 5)
    await connection.aclose()
    second = Geo_service.get_default_geo_resolver()

    assert second is first
    assert not second.executor.client.is_closed
    assert second.cache.get("towns_wicklow") == []
    await connection.aclose()


# ===== resolve_county_bounds =====

@pytest.mark.asyncio
@pytest.mark.parametrize("county", sorted(IRISH_COUNTY_BOUNDS))
async def test_hardcoded_counties_resolve_without_network(resolver, overpass_api, county):
    route = overpass_api.post(OVERPASS_URL)

    bounds = await resolver.resolve_county_bounds(county)

    assert bounds == IRISH_COUNTY_BOUNDS[county]
    assert route.call_count == 0


@pytest.mark.asyncio
async def test_hardcoded_lookup_ignores_case_and_whitespace(resolver, overpass_api):
    route = overpass_api.post(OVERPASS_URL)

    assert await resolver.resolve_county_bounds("  Wicklow ") == IRISH_COUNTY_BOUNDS["wicklow"]
    assert route.call_count == 0


@pytest.mark.asyncio
async def test_unknown_county_bounds_come_from_provider_and_are_cached(resolver, overpass_api):
    route = overpass_api.post(OVERPASS_URL).mock(return_value=httpx.Response(200, json={
        "elements": [{"type": "relation", "id": 1, "bounds": ANTRIM_BOUNDS}]
    }))

    first = await resolver.resolve_county_bounds("antrim")
    second = await resolver.resolve_county_bounds("antrim")

    expected = BoundingBox(min_lat=53.0, max_lat=53.5, min_lon=-7.0, max_lon=-6.5)
    assert first == expected
    assert second == expected
    assert route.call_count == 1
    assert "out geom;" in overpass_query(route.calls.last.request)


@pytest.mark.asyncio
async def test_provider_bounds_expire_after_an_hour(resolver, overpass_api, fake_clock):
    route = overpass_api.post(OVERPASS_URL).mock(return_value=httpx.Response(200, json={
        "elements": [{"type": "relation", "id": 1, "bounds": ANTRIM_BOUNDS}]
    }))

    await resolver.resolve_county_bounds("antrim")
    fake_clock.advance(61 * 60)
    await resolver.resolve_county_bounds("antrim")

    assert route.call_count == 2


@pytest.mark.asyncio
async def test_no_matching_area_is_absent_not_an_error(resolver, overpass_api):
    overpass_api.post(OVERPASS_URL).mock(return_value=httpx.Response(200, json={"elements": []}))

    assert await resolver.resolve_county_bounds("atlantis") is None


@pytest.mark.asyncio
async def test_provider_failure_resolving_bounds_returns_none(resolver, overpass_api):
    overpass_api.post(OVERPASS_URL).mock(return_value=httpx.Response(504))

    assert await resolver.resolve_county_bounds("antrim") is None


# ===== list_places_in_county =====

@pytest.mark.asyncio
async def test_sparse_area_result_falls_back_to_bounding_box(resolver, overpass_api):
    route = overpass_api.post(OVERPASS_URL).mock(side_effect=_by_strategy(
        area_elements=_towns(3, "Area"),
        bbox_elements=_towns(40, "Box"),
    ))

    towns = await resolver.list_places_in_county("Wicklow")

    assert len(towns) == 40
    assert all(t.name.startswith("Box") for t in towns)
    assert route.call_count == 2
    bbox_query = overpass_query(route.calls.last.request)
    assert "(52.8,-6.8,53.3,-5.9)" in bbox_query


@pytest.mark.asyncio
async def test_area_result_kept_when_bounding_box_is_not_larger(resolver, overpass_api):
    overpass_api.post(OVERPASS_URL).mock(side_effect=_by_strategy(
        area_elements=_towns(5, "Area"),
        bbox_elements=_towns(5, "Box"),
    ))

    towns = await resolver.list_places_in_county("wicklow")

    assert all(t.name.startswith("Area") for t in towns)


@pytest.mark.asyncio
async def test_rich_area_result_skips_bounding_box_query(resolver, overpass_api):
    route = overpass_api.post(OVERPASS_URL).mock(side_effect=_by_strategy(
        area_elements=_towns(12, "Area"),
        bbox_elements=_towns(40, "Box"),
    ))

    towns = await resolver.list_places_in_county("wicklow")

    assert len(towns) == 12
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_listing_is_deduped_and_sorted_by_name(resolver, overpass_api):
    elements = [node(1, "wicklow"), node(2, "Arklow"), node(3, "Wicklow "), node(4, "bray")] + _towns(10, "Town")
    overpass_api.post(OVERPASS_URL).mock(return_value=httpx.Response(200, json={"elements": elements}))

    towns = await resolver.list_places_in_county("wicklow")

    names = [t.name for t in towns]
    assert names[:2] == ["Arklow", "bray"]
    assert names[-1] == "wicklow"
    assert len(names) == 13


@pytest.mark.asyncio
async def test_listing_is_cached_for_five_minutes(resolver, overpass_api, fake_clock):
    route = overpass_api.post(OVERPASS_URL).mock(
        return_value=httpx.Response(200, json={"elements": _towns(12, "Town")})
    )

    await resolver.list_places_in_county("wicklow")
    await resolver.list_places_in_county("WICKLOW")
    assert route.call_count == 1

    fake_clock.advance(5 * 60)
    await resolver.list_places_in_county("wicklow")
    assert route.call_count == 2


@pytest.mark.asyncio
async def test_listing_degrades_to_empty_on_provider_error(resolver, overpass_api):
    overpass_api.post(OVERPASS_URL).mock(return_value=httpx.Response(503))

    assert await resolver.list_places_in_county("wicklow") == []


@pytest.mark.asyncio
async def test_listing_degrades_to_empty_when_throttling_persists(resolver, overpass_api, fake_clock):
    route = overpass_api.post(OVERPASS_URL).mock(return_value=httpx.Response(429))

    assert await resolver.list_places_in_county("wicklow") == []
    assert route.call_count == 3
    assert fake_clock.sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_failed_listing_is_not_cached(resolver, overpass_api):
    route = overpass_api.post(OVERPASS_URL).mock(side_effect=[
        httpx.Response(503),
        httpx.Response(200, json={"elements": _towns(12, "Town")}),
    ])

    assert await resolver.list_places_in_county("wicklow") == []
    assert len(await resolver.list_places_in_county("wicklow")) == 12
    assert route.call_count == 2


# ===== search_places_in_county =====

@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   "])
async def test_empty_search_text_makes_no_call(resolver, overpass_api, text):
    route = overpass_api.post(OVERPASS_URL)

    assert await resolver.search_places_in_county("wicklow", text) == []
    assert route.call_count == 0


@pytest.mark.asyncio
async def test_search_filters_cached_county_listing_in_memory(resolver, overpass_api):
    elements = [node(1, "Bray"), node(2, "Little Bray"), node(3, "Arklow")] + _towns(10, "Town")
    route = overpass_api.post(OVERPASS_URL).mock(return_value=httpx.Response(200, json={"elements": elements}))
    await resolver.list_places_in_county("wicklow")

    results = await resolver.search_places_in_county("Wicklow", "BRAY")

    assert [p.name for p in results] == ["Bray", "Little Bray"]
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_search_queries_provider_when_no_listing_is_cached(resolver, overpass_api):
    route = overpass_api.post(OVERPASS_URL).mock(return_value=httpx.Response(200, json={
        "elements": [node(1, "Bray"), node(2, "bray"), node(3, "Bray Head", natural="bay")]
    }))

    results = await resolver.search_places_in_county("wicklow", "bray")

    assert [p.name for p in results] == ["Bray", "Bray Head"]
    query = overpass_query(route.calls.last.request)
    assert '["name"~"bray",i]' in query
    assert "(52.8,-6.8,53.3,-5.9)" in query


@pytest.mark.asyncio
async def test_search_results_are_cached(resolver, overpass_api, fake_clock):
    route = overpass_api.post(OVERPASS_URL).mock(
        return_value=httpx.Response(200, json={"elements": [node(1, "Bray")]})
    )

    await resolver.search_places_in_county("wicklow", "bray")
    await resolver.search_places_in_county("wicklow", "Bray")
    assert route.call_count == 1

    fake_clock.advance(20 * 60)
    await resolver.search_places_in_county("wicklow", "bray")
    assert route.call_count == 2


@pytest.mark.asyncio
async def test_search_in_unresolvable_county_returns_empty(resolver, overpass_api):
    route = overpass_api.post(OVERPASS_URL).mock(return_value=httpx.Response(200, json={"elements": []}))

    assert await resolver.search_places_in_county("atlantis", "bray") == []
    # only the boundary lookup was attempted
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_search_degrades_to_empty_on_provider_error(resolver, overpass_api):
    overpass_api.post(OVERPASS_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))

    assert await resolver.search_places_in_county("wicklow", "bray") == []
