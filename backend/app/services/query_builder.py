"""
Overpass QL query construction.

Three retrieval strategies are supported: places inside a named
administrative area, places inside an explicit bounding box, and a
name-pattern search inside a bounding box. A fourth query resolves only
the boundary geometry of a county so a bounding box can be derived from it.
None of these functions touch the network.
"""
import re

from app.core.config import settings
from app.models.places_model import BoundingBox

PLACE_FILTER = '["place"~"^(city|town|village|hamlet|locality|suburb)$"]'
NATURAL_FILTER = '["natural"~"^(bay|beach)$"]'
TOURISM_FILTER = '["tourism"~"^(attraction|resort)$"]'
ADMIN_FILTER = '["boundary"="administrative"]["admin_level"~"^(6|7)$"]'

_REGEX_SPECIAL = re.compile(r'([.^$*+?()\[\]{}|\\])')


def _require_text(value: str, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{what} must be a non-empty string")
    return value


def _prologue() -> str:
    return f"[out:json][timeout:{settings.OVERPASS_QUERY_TIMEOUT}];"


def normalize_county_name(county_name: str) -> str:
    """Capitalise the first letter: OSM stores county names as 'Wicklow'."""
    return county_name[:1].upper() + county_name[1:]


def _quote(value: str) -> str:
    """Escape a value for use inside a double-quoted QL string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _regex_literal(text: str) -> str:
    """Regex that matches text literally, ready to drop into a QL string."""
    return _quote(_REGEX_SPECIAL.sub(r"\\\1", text))


def _bbox(bounds: BoundingBox) -> str:
    return f"({bounds.min_lat},{bounds.min_lon},{bounds.max_lat},{bounds.max_lon})"


def _county_name_pattern(county_name: str) -> str:
    county = _regex_literal(normalize_county_name(county_name))
    return f'["name"~"^({county}|County {county})$"]'


def build_area_query(county_name: str) -> str:
    _require_text(county_name, "county_name")
    return f"""
      {_prologue()}
      area{ADMIN_FILTER}{_county_name_pattern(county_name)}->.county_area;
      (
        nwr{PLACE_FILTER}["name"](area.county_area);
        nwr{NATURAL_FILTER}["name"](area.county_area);
        nwr{TOURISM_FILTER}["name"](area.county_area);
      );
      out center;
    """


def build_bounding_box_query(bounds: BoundingBox, county_name: str) -> str:
    # county_name is not part of the query text, it only has to be valid
    _require_text(county_name, "county_name")
    box = _bbox(bounds)
    return f"""
      {_prologue()}
      (
        nwr{PLACE_FILTER}["name"]{box};
        nwr{NATURAL_FILTER}["name"]{box};
        nwr{TOURISM_FILTER}["name"]{box};
      );
      out center;
    """


def build_search_query(bounds: BoundingBox, text: str) -> str:
    _require_text(text, "text")
    box = _bbox(bounds)
    name = f'["name"~"{_regex_literal(text)}",i]'
    return f"""
      {_prologue()}
      (
        nwr{PLACE_FILTER}{name}{box};
        nwr{NATURAL_FILTER}{name}{box};
        nwr{TOURISM_FILTER}{name}{box};
      );
      out center;
    """


def build_county_area_resolution_query(county_name: str) -> str:
    _require_text(county_name, "county_name")
    return f"""
      {_prologue()}
      rel{ADMIN_FILTER}{_county_name_pattern(county_name)};
      out geom;
    """
