"""Shared constants and the plain-Python sync configuration."""

from dataclasses import dataclass, replace


# ============================================================================
# SCENE / OBJECT KEYS
# ============================================================================
# Geo-reference lives on the scene as custom properties; the tracked transform
# lives on the viewport object under ATTR_NAMESPACE.

SCENE_KEY_NORTH_ANGLE = "TGEO_NORTH_ANGLE_DEG"
SCENE_KEY_HEIGHT = "TGEO_ORIGIN_HEIGHT"
SCENE_KEY_LATITUDE = "TGEO_ORIGIN_LATITUDE"
SCENE_KEY_LONGITUDE = "TGEO_ORIGIN_LONGITUDE"

ATTR_NAMESPACE = "terrain_geolocation"
ATTR_TRANSFORM = "transformation"

DEFAULT_TERRAIN_NAME = "Terrain"
DEFAULT_DATA_NAME = "Terrain Data"

# Host linear precision. Blender works in metres, so this is one millimetre.
DEFAULT_LENGTH_TOLERANCE = 1e-3
DEFAULT_SINGULAR_TOLERANCE = 1e-12


@dataclass(frozen=True)
class SyncConfig:
    """Settings for one terrain sync setup."""

    terrain_name: str = DEFAULT_TERRAIN_NAME
    data_name: str = DEFAULT_DATA_NAME
    length_tolerance: float = DEFAULT_LENGTH_TOLERANCE
    singular_tolerance: float = DEFAULT_SINGULAR_TOLERANCE
    attribute_namespace: str = ATTR_NAMESPACE
    transform_key: str = ATTR_TRANSFORM
    operation_name: str = "Update Terrain"
    compensate_north_projection: bool = True

    def __post_init__(self):
        if not self.terrain_name or not self.data_name:
            raise ValueError("terrain_name and data_name must be non-empty")
        if self.terrain_name == self.data_name:
            raise ValueError("terrain_name and data_name must differ")
        if not self.length_tolerance > 0.0:
            raise ValueError(f"length_tolerance must be > 0, got {self.length_tolerance}")
        if not self.singular_tolerance > 0.0:
            raise ValueError(f"singular_tolerance must be > 0, got {self.singular_tolerance}")

    def with_overrides(self, **kwargs) -> "SyncConfig":
        return replace(self, **kwargs)
