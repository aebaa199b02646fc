import logging
import math
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from app.core.logger import logs
from app.models.places_model import BoundingBox, PlaceEntry, PlaceKind


def _coordinates(element: dict) -> tuple[Optional[float], Optional[float]]:
    """Direct point for nodes, computed center for ways and relations."""
    lat = element.get("lat")
    lon = element.get("lon")
    if lat is None or lon is None:
        center = element.get("center") or {}
        lat = center.get("lat")
        lon = center.get("lon")
    return lat, lon


def _classify(tags: dict) -> tuple[str, PlaceKind]:
    if tags.get("place"):
        return tags["place"], PlaceKind.SETTLEMENT
    if tags.get("natural"):
        return tags["natural"], PlaceKind.NATURAL_FEATURE
    if tags.get("tourism"):
        return tags["tourism"], PlaceKind.ATTRACTION
    return "locality", PlaceKind.SETTLEMENT


def elements_to_places(elements: Iterable[dict]) -> List[PlaceEntry]:
    """
    Converts raw Overpass elements into place entries.
    Elements without a name, without usable coordinates or with malformed
    fields are dropped.
    """
    places = []
    for element in elements or []:
        tags = element.get("tags") or {}
        name = tags.get("name")
        if not isinstance(name, str) or not name.strip():
            continue

        lat, lon = _coordinates(element)
        if lat is None or lon is None:
            continue

        place_type, kind = _classify(tags)
        try:
            place = PlaceEntry(
                external_id=element.get("id"),
                name=name,
                place_type=place_type,
                kind=kind,
                lat=lat,
                lon=lon
            )
        except ValidationError as e:
            logs.log(logging.WARNING, f"Skipping malformed Overpass element {element.get('id')!r}: {e.error_count()} invalid field(s)")
            continue
        places.append(place)
    return places


def dedupe_places(places: Iterable[PlaceEntry]) -> List[PlaceEntry]:
    """Keeps the first entry per trimmed, lower-cased name."""
    seen = set()
    unique = []
    for place in places:
        key = place.name.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(place)
    return unique


def aggregate_bounds(elements: Iterable[dict]) -> Optional[BoundingBox]:
    """
    Folds every `bounds` field and every coordinate of every `geometry`
    array (relation members included) into one rectangle.
    Returns None when no coordinate was seen at all.
    """
    min_lat, max_lat = math.inf, -math.inf
    min_lon, max_lon = math.inf, -math.inf

    def fold(lat: Any, lon: Any):
        nonlocal min_lat, max_lat, min_lon, max_lon
        if lat is None or lon is None:
            return
        min_lat = min(min_lat, lat)
        max_lat = max(max_lat, lat)
        min_lon = min(min_lon, lon)
        max_lon = max(max_lon, lon)

    def fold_geometry(geometry: Any):
        for coord in geometry or []:
            # Overpass emits null for members outside the query region
            if coord:
                fold(coord.get("lat"), coord.get("lon"))

    for element in elements or []:
        bounds = element.get("bounds")
        if bounds:
            fold(bounds.get("minlat"), bounds.get("minlon"))
            fold(bounds.get("maxlat"), bounds.get("maxlon"))

        fold_geometry(element.get("geometry"))
        for member in element.get("members") or []:
            fold_geometry(member.get("geometry"))

    if min_lat == math.inf:
        return None

    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)
