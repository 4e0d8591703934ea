import math

import numpy as np
import pytest

from terrain_geolocation.pipeline.geo.projection import (
    CompensatedProjection,
    LatLong,
    NativeProjection,
    compensate_north_angle,
    latlong_to_utm,
    utm_to_latlong,
    utm_zone,
    validate_latlong,
)
from terrain_geolocation.utils.errors import GeoReferenceError


STOCKHOLM = LatLong(59.3293, 18.0686)


def test_utm_zone_from_longitude():
    assert utm_zone(18.0686) == 34
    assert utm_zone(-180.0) == 1
    assert utm_zone(180.0) == 60
    assert utm_zone(9.0) == 32


def test_latlong_utm_round_trip():
    utm = latlong_to_utm(STOCKHOLM)
    assert utm.zone == 34 and utm.hemisphere == "N"
    assert utm.epsg == 32634
    back = utm_to_latlong(utm)
    assert back.latitude == pytest.approx(STOCKHOLM.latitude, abs=1e-9)
    assert back.longitude == pytest.approx(STOCKHOLM.longitude, abs=1e-9)


def test_southern_hemisphere_uses_south_zone():
    utm = latlong_to_utm(LatLong(-33.8688, 151.2093))
    assert utm.hemisphere == "S"
    assert utm.epsg == 32756


@pytest.mark.parametrize("lat, lon", [(91, 0), (0, 181), (float("nan"), 0), ("x", 0)])
def test_invalid_latlong(lat, lon):
    with pytest.raises(GeoReferenceError):
        validate_latlong(lat, lon)


def test_compensation_rotates_by_twice_the_angle():
    p = compensate_north_angle((1.0, 0.0, 2.0), math.radians(45))
    assert np.allclose(p, (0.0, 1.0, 2.0))


def test_compensated_projection_net_rotation_is_north_angle():
    angle = math.radians(30)
    origin = latlong_to_utm(STOCKHOLM)
    utm = CompensatedProjection(compensate=True).point_to_utm((0.0, 10.0, 0.0), STOCKHOLM, angle)
    assert utm.easting - origin.easting == pytest.approx(-10 * math.sin(angle), abs=1e-6)
    assert utm.northing - origin.northing == pytest.approx(10 * math.cos(angle), abs=1e-6)


def test_native_projection_turns_the_other_way():
    angle = math.radians(30)
    origin = latlong_to_utm(STOCKHOLM)
    utm = NativeProjection().point_to_utm((0.0, 10.0, 0.0), STOCKHOLM, angle)
    assert utm.easting - origin.easting == pytest.approx(10 * math.sin(angle), abs=1e-6)
    assert CompensatedProjection(compensate=False).point_to_utm((0.0, 10.0, 0.0), STOCKHOLM, angle) == utm


def test_origin_projects_to_origin_latlong():
    ll = CompensatedProjection().point_to_latlong((0, 0, 0), STOCKHOLM, math.radians(12))
    assert ll.latitude == pytest.approx(STOCKHOLM.latitude, abs=1e-9)
    assert ll.longitude == pytest.approx(STOCKHOLM.longitude, abs=1e-9)
