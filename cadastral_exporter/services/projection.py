"""Spherical Web Mercator (EPSG:3857) to WGS84 (EPSG:4326) conversion."""
import math

# Half the equatorial circumference of the Web Mercator sphere, in metres
ORIGIN_SHIFT = 20037508.34


def web_mercator_to_wgs84(x: float, y: float) -> tuple[float, float]:
    """Convert a Web Mercator (x, y) pair to (lon, lat) in degrees.

    Total for finite input. Results are not range checked; callers that need
    finite output must check it themselves.
    """
    lon = x / ORIGIN_SHIFT * 180.0
    lat = y / ORIGIN_SHIFT * 180.0
    try:
        growth = math.exp(lat * math.pi / 180.0)
    except OverflowError:
        growth = math.inf
    lat = 180.0 / math.pi * (2.0 * math.atan(growth) - math.pi / 2.0)
    return lon, lat
