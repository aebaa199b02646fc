"""
Hardcoded bounding boxes for the counties of the Republic of Ireland.
Used before (and instead of) asking Overpass for a county's boundary.
"""
from app.models.places_model import BoundingBox


def _box(min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> BoundingBox:
    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)


IRISH_COUNTY_BOUNDS: dict[str, BoundingBox] = {
    "wicklow": _box(52.8, 53.3, -6.8, -5.9),
    "dublin": _box(53.2, 53.6, -6.6, -6.0),
    "cork": _box(51.3, 52.3, -10.0, -7.8),
    "galway": _box(53.0, 53.8, -10.2, -8.4),
    "kerry": _box(51.6, 52.4, -10.5, -9.3),
    "mayo": _box(53.5, 54.3, -10.3, -8.7),
    "donegal": _box(54.6, 55.4, -8.6, -7.3),
    "limerick": _box(52.3, 52.8, -9.0, -8.2),
    "tipperary": _box(52.3, 53.0, -8.3, -7.3),
    "waterford": _box(52.0, 52.4, -8.0, -7.0),
    "kilkenny": _box(52.2, 52.8, -7.7, -6.9),
    "wexford": _box(52.1, 52.7, -7.0, -6.1),
    "carlow": _box(52.6, 52.9, -7.0, -6.7),
    "laois": _box(52.8, 53.3, -7.9, -7.1),
    "kildare": _box(53.1, 53.5, -7.3, -6.5),
    "meath": _box(53.3, 53.8, -7.3, -6.4),
    "louth": _box(53.7, 54.1, -6.8, -6.1),
    "westmeath": _box(53.3, 53.7, -7.9, -7.1),
    "offaly": _box(53.0, 53.5, -8.0, -7.1),
    "longford": _box(53.6, 53.9, -8.0, -7.5),
    "roscommon": _box(53.6, 54.1, -8.8, -7.9),
    "sligo": _box(54.1, 54.5, -8.9, -8.2),
    "leitrim": _box(54.0, 54.5, -8.3, -7.8),
    "cavan": _box(53.9, 54.4, -7.9, -6.8),
    "monaghan": _box(54.0, 54.4, -7.5, -6.8),
    "clare": _box(52.6, 53.2, -9.9, -8.4),
}


def lookup_county_bounds(county_key: str) -> BoundingBox | None:
    """county_key is the trimmed, lower-cased county name."""
    return IRISH_COUNTY_BOUNDS.get(county_key)
