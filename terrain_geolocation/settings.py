import bpy
from bpy.types import PropertyGroup
from bpy.props import (
    StringProperty,
    BoolProperty,
    FloatProperty,
)

from .utils.common import (
    DEFAULT_DATA_NAME,
    DEFAULT_LENGTH_TOLERANCE,
    DEFAULT_TERRAIN_NAME,
    SyncConfig,
)


class TGEOSettings(PropertyGroup):
    terrain_name: StringProperty(
        name="Terrain",
        description="Mesh object the user moves, rotates and scales",
        default=DEFAULT_TERRAIN_NAME,
    )
    data_name: StringProperty(
        name="Terrain Data",
        description="Hidden mesh object the terrain is cropped from",
        default=DEFAULT_DATA_NAME,
    )
    length_tolerance: FloatProperty(
        name="Length Tolerance",
        description="Changes below this length count as no change",
        default=DEFAULT_LENGTH_TOLERANCE,
        min=1e-9,
        precision=6,
        subtype="DISTANCE",
    )
    compensate_north_projection: BoolProperty(
        name="Compensate North Angle",
        description="Pre-rotate points by twice the north angle before projecting to UTM",
        default=True,
    )
    auto_attach: BoolProperty(
        name="Attach On Load",
        description="Start terrain tracking when a file is opened",
        default=True,
    )
    log_export_path: StringProperty(
        name="Log File",
        default="//terrain_geolocation_log.txt",
        subtype="FILE_PATH",
    )

    def to_config(self) -> SyncConfig:
        return SyncConfig(
            terrain_name=self.terrain_name.strip() or DEFAULT_TERRAIN_NAME,
            data_name=self.data_name.strip() or DEFAULT_DATA_NAME,
            length_tolerance=float(self.length_tolerance),
            compensate_north_projection=bool(self.compensate_north_projection),
        )
