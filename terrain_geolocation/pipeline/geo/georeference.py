"""
Model geo-reference: north angle, origin height and origin latitude/longitude.

All reads and writes go through a GeoReferenceStore (scene custom properties
inside Blender). move_earth() keeps the world fixed while the local frame
moves: the three fields are computed from the same movement and written in
one step.
"""

import math
from dataclasses import dataclass
from typing import Sequence

from ...utils.common import SyncConfig
from ...utils.errors import GeoReferenceError
from ...utils.logging_system import log_info
from .math_helper import Y_AXIS, invert, origin, planar_angle, yaxis
from .projection import CompensatedProjection, LatLong, UTMPoint, validate_latlong


def normalize_angle(angle: float) -> float:
    """Wrap to [-pi, pi]."""
    return math.atan2(math.sin(angle), math.cos(angle))


@dataclass(frozen=True)
class GeoReference:
    north_angle: float  # radians, counter-clockwise from model Y axis
    height: float
    latitude: float
    longitude: float

    @property
    def latlong(self) -> LatLong:
        return LatLong(self.latitude, self.longitude)


class GeoReferenceModel:
    """Accessors and update math over the persisted geo-reference."""

    def __init__(self, store, projection: CompensatedProjection = None, config: SyncConfig = None):
        self.store = store
        self.config = config or SyncConfig()
        self.projection = projection or CompensatedProjection(
            compensate=self.config.compensate_north_projection
        )

    # ------------------------------------------------------------------
    # Plain accessors
    # ------------------------------------------------------------------

    @property
    def north_angle(self) -> float:
        """Radians counter-clockwise from model Y axis."""
        return math.radians(self.store.get_north_angle_degrees())

    @north_angle.setter
    def north_angle(self, value: float):
        value = float(value)
        if not math.isfinite(value):
            raise GeoReferenceError(f"[Geo] non-finite north angle: {value}")
        self.store.set_north_angle_degrees(math.degrees(value))

    @property
    def height(self) -> float:
        # Height of the model origin along Z, in model units.
        return float(self.store.get_height())

    @height.setter
    def height(self, value: float):
        value = float(value)
        if not math.isfinite(value):
            raise GeoReferenceError(f"[Geo] non-finite height: {value}")
        self.store.set_height(value)

    @property
    def origin_latlong(self) -> LatLong:
        return LatLong(*self.store.get_latlong())

    @origin_latlong.setter
    def origin_latlong(self, value: Sequence[float]):
        ll = validate_latlong(*value)
        self.store.set_latlong(ll.latitude, ll.longitude)

    @property
    def reference(self) -> GeoReference:
        ll = self.origin_latlong
        return GeoReference(self.north_angle, self.height, ll.latitude, ll.longitude)

    def apply(self, reference: GeoReference):
        """Validate every field first, then write them together."""
        ll = validate_latlong(reference.latitude, reference.longitude)
        for label, value in (("north angle", reference.north_angle), ("height", reference.height)):
            if not math.isfinite(value):
                raise GeoReferenceError(f"[Geo] non-finite {label}: {value}")
        self.store.set_north_angle_degrees(math.degrees(reference.north_angle))
        self.store.set_height(float(reference.height))
        self.store.set_latlong(ll.latitude, ll.longitude)

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def point_to_utm(self, point: Sequence[float]) -> UTMPoint:
        return self.projection.point_to_utm(point, self.origin_latlong, self.north_angle)

    def point_to_latlong(self, point: Sequence[float]) -> LatLong:
        return self.projection.point_to_latlong(point, self.origin_latlong, self.north_angle)

    def point_to_height(self, point: Sequence[float]) -> float:
        return float(point[2]) + self.height

    def describe_point(self, point: Sequence[float]) -> str:
        """Position, lat/long, UTM and height of a local point, one per line."""
        position = ", ".join(f"{float(c):.3f}" for c in point)
        return (
            f"Position: {position}\n"
            f"LatLong: {self.point_to_latlong(point)}\n"
            f"UTM: {self.point_to_utm(point)}\n"
            f"Height: {self.point_to_height(point):.3f}\n"
        )

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def moved_reference(self, movement) -> GeoReference:
        """Geo-reference after the local frame moved by ``movement`` (nothing written).

        Raises:
            SingularTransformError: if ``movement`` cannot be inverted.
        """
        inverse = invert(movement, context="Geo", tolerance=self.config.singular_tolerance)
        new_origin = origin(inverse)
        latlong = self.point_to_latlong(new_origin)
        return GeoReference(
            north_angle=normalize_angle(self.north_angle + planar_angle(yaxis(movement), Y_AXIS)),
            height=self.height + float(new_origin[2]),
            latitude=latlong.latitude,
            longitude=latlong.longitude,
        )

    def move_earth(self, movement) -> GeoReference:
        """Update the geo-reference for a rigid motion of the viewport."""
        before = self.reference
        after = self.moved_reference(movement)
        self.apply(after)
        log_info(
            f"[Geo] moved earth: north {math.degrees(before.north_angle):.4f}"
            f" -> {math.degrees(after.north_angle):.4f} deg,"
            f" height {before.height:.3f} -> {after.height:.3f},"
            f" latlong {before.latlong} -> {after.latlong}"
        )
        return after
