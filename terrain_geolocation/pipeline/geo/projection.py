"""
Point projection: local model coordinates -> UTM -> latitude/longitude.

The geo-reference anchors the model origin at (latitude, longitude). A local
point is offset from the origin's UTM position in the horizontal plane, so
only the origin itself goes through a real datum transformation (pyproj,
WGS84 <-> UTM zone of the origin).

The native projection follows the host convention, which turns the point by
the *negative* north angle. compensate_north_angle() pre-rotates by twice the
north angle so the net rotation is by the north angle itself. The adapter is
kept separate so it can be switched off (SyncConfig.compensate_north_projection)
for a host that projects correctly.
"""

import math
from functools import lru_cache
from typing import NamedTuple, Sequence

import numpy as np
from pyproj import Transformer
from pyproj.exceptions import ProjError

from ...utils.errors import GeoReferenceError
from .math_helper import rotation_z, transform_point


WGS84 = "EPSG:4326"


class LatLong(NamedTuple):
    latitude: float
    longitude: float

    def __str__(self):
        ns = "N" if self.latitude >= 0 else "S"
        ew = "E" if self.longitude >= 0 else "W"
        return f"{abs(self.latitude):.6f}{ns}, {abs(self.longitude):.6f}{ew}"


class UTMPoint(NamedTuple):
    easting: float
    northing: float
    zone: int
    hemisphere: str  # "N" or "S"

    @property
    def epsg(self) -> int:
        return utm_epsg(self.zone, self.hemisphere)

    def __str__(self):
        return f"{self.zone}{self.hemisphere} {self.easting:.3f}E {self.northing:.3f}N"


def validate_latlong(latitude: float, longitude: float) -> LatLong:
    """Return a LatLong or raise GeoReferenceError for out-of-range/non-finite values."""
    try:
        lat, lon = float(latitude), float(longitude)
    except (TypeError, ValueError) as ex:
        raise GeoReferenceError(f"[Geo] lat/long must be numbers: {ex}") from ex
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise GeoReferenceError(f"[Geo] non-finite lat/long ({lat}, {lon})")
    if not -90.0 <= lat <= 90.0:
        raise GeoReferenceError(f"[Geo] latitude out of range: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise GeoReferenceError(f"[Geo] longitude out of range: {lon}")
    return LatLong(lat, lon)


def utm_zone(longitude: float) -> int:
    zone = int((float(longitude) + 180.0) // 6.0) + 1
    return min(max(zone, 1), 60)


def utm_epsg(zone: int, hemisphere: str) -> int:
    return (32600 if hemisphere == "N" else 32700) + int(zone)


@lru_cache(maxsize=32)
def _transformer(src: str, dst: str) -> Transformer:
    return Transformer.from_crs(src, dst, always_xy=True)


def latlong_to_utm(latlong: LatLong, zone: int = None, hemisphere: str = None) -> UTMPoint:
    """Project a WGS84 lat/long into UTM (zone of the point unless given)."""
    lat, lon = validate_latlong(*latlong)
    zone = zone or utm_zone(lon)
    hemisphere = hemisphere or ("N" if lat >= 0 else "S")
    try:
        e, n = _transformer(WGS84, f"EPSG:{utm_epsg(zone, hemisphere)}").transform(lon, lat)
    except ProjError as ex:
        raise GeoReferenceError(f"[Geo] UTM projection failed for {lat}, {lon}: {ex}") from ex
    if not (math.isfinite(e) and math.isfinite(n)):
        raise GeoReferenceError(f"[Geo] UTM projection failed for {lat}, {lon}")
    return UTMPoint(float(e), float(n), zone, hemisphere)


def utm_to_latlong(utm: UTMPoint) -> LatLong:
    try:
        lon, lat = _transformer(f"EPSG:{utm.epsg}", WGS84).transform(utm.easting, utm.northing)
    except ProjError as ex:
        raise GeoReferenceError(f"[Geo] inverse UTM projection failed for {utm}: {ex}") from ex
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise GeoReferenceError(f"[Geo] inverse UTM projection failed for {utm}")
    return LatLong(float(lat), float(lon))


def compensate_north_angle(point: Sequence[float], north_angle: float) -> np.ndarray:
    """Pre-rotate ``point`` by twice the north angle about the model Z axis.

    Counters the native projection turning points the wrong way around.
    """
    return transform_point(rotation_z(2.0 * north_angle), point)


class NativeProjection:
    """Host-style projection of local points relative to the geo-referenced origin."""

    def point_to_utm(self, point: Sequence[float], origin_latlong: LatLong, north_angle: float) -> UTMPoint:
        origin_utm = latlong_to_utm(origin_latlong)
        local = transform_point(rotation_z(-north_angle), point)
        return origin_utm._replace(
            easting=origin_utm.easting + float(local[0]),
            northing=origin_utm.northing + float(local[1]),
        )


class CompensatedProjection:
    """Wraps a native projection, optionally applying compensate_north_angle()."""

    def __init__(self, native: NativeProjection = None, compensate: bool = True):
        self.native = native or NativeProjection()
        self.compensate = compensate

    def point_to_utm(self, point: Sequence[float], origin_latlong: LatLong, north_angle: float) -> UTMPoint:
        if self.compensate:
            point = compensate_north_angle(point, north_angle)
        return self.native.point_to_utm(point, origin_latlong, north_angle)

    def point_to_latlong(self, point: Sequence[float], origin_latlong: LatLong, north_angle: float) -> LatLong:
        return utm_to_latlong(self.point_to_utm(point, origin_latlong, north_angle))
