import math

import pytest

from cadastral_exporter.services.projection import ORIGIN_SHIFT, web_mercator_to_wgs84


def test_origin_maps_to_origin():
    assert web_mercator_to_wgs84(0.0, 0.0) == pytest.approx((0.0, 0.0), abs=1e-12)


def test_antimeridian():
    lon, lat = web_mercator_to_wgs84(ORIGIN_SHIFT, 0.0)
    assert lon == pytest.approx(180.0, abs=1e-6)
    assert lat == pytest.approx(0.0, abs=1e-6)


def test_web_mercator_latitude_limit():
    _, lat = web_mercator_to_wgs84(0.0, ORIGIN_SHIFT)
    assert lat == pytest.approx(85.0511287798, abs=1e-6)


def test_inverse_of_forward_mercator():
    lon, lat = 49.12, 55.79
    x = lon * ORIGIN_SHIFT / 180.0
    y = math.degrees(math.log(math.tan(math.pi / 4 + math.radians(lat) / 2))) * ORIGIN_SHIFT / 180.0
    assert web_mercator_to_wgs84(x, y) == pytest.approx((lon, lat), abs=1e-9)


def test_longitude_monotonic_in_x():
    xs = [-ORIGIN_SHIFT, -1e6, -1.0, 0.0, 0.5, 1e3, 1e6, ORIGIN_SHIFT]
    lons = [web_mercator_to_wgs84(x, 123.0)[0] for x in xs]
    assert lons == sorted(lons)


def test_latitude_symmetric():
    _, north = web_mercator_to_wgs84(0.0, 5e6)
    _, south = web_mercator_to_wgs84(0.0, -5e6)
    assert north == pytest.approx(-south)


def test_huge_y_does_not_raise():
    _, lat = web_mercator_to_wgs84(0.0, 1e300)
    assert lat == pytest.approx(90.0)
    _, lat = web_mercator_to_wgs84(0.0, -1e300)
    assert lat == pytest.approx(-90.0)


def test_non_finite_input_gives_non_finite_output():
    lon, _ = web_mercator_to_wgs84(math.inf, 0.0)
    assert not math.isfinite(lon)
