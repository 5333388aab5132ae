"""Seoul geography helpers: address cleanup, bounds and district lookup."""
import re

# (min_lon, max_lon, min_lat, max_lat)
_SEOUL_BOUNDS = (126.7, 127.3, 37.4, 37.7)
_GWANGJIN_BOUNDS = (127.05, 127.15, 37.52, 37.57)

PILOT_DISTRICT = "광진구"
_FALLBACK_DISTRICT = "서울시"


def _inside(coordinates: tuple[float, float], bounds: tuple[float, float, float, float]) -> bool:
    lon, lat = coordinates
    min_lon, max_lon, min_lat, max_lat = bounds
    return min_lon <= lon <= max_lon and min_lat <= lat <= max_lat


def format_korean_address(address: str) -> str:
    """Collapse runs of whitespace and trim the ends."""
    return re.sub(r"\s+", " ", address).strip()


def is_within_seoul(coordinates: tuple[float, float]) -> bool:
    """True if a (lon, lat) pair falls inside Seoul's approximate bounding box."""
    return _inside(coordinates, _SEOUL_BOUNDS)


def get_district_from_coordinates(coordinates: tuple[float, float]) -> str:
    # Box test against the pilot district only; everything else is "Seoul".
    if _inside(coordinates, _GWANGJIN_BOUNDS):
        return PILOT_DISTRICT
    return _FALLBACK_DISTRICT
