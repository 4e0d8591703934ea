import bpy
from bpy.types import Panel

from . import ops
from .utils.common import SCENE_KEY_HEIGHT, SCENE_KEY_LATITUDE, SCENE_KEY_LONGITUDE, SCENE_KEY_NORTH_ANGLE
from .utils.logging_system import get_logger


def _settings(context):
    return getattr(context.scene, "terrain_geolocation_settings", None)


class TGEO_PT_GeoLocation(Panel):
    bl_label = "Terrain Geo Location"
    bl_idname = "TGEO_PT_geo_location"
    bl_space_type = "VIEW_3D"
    bl_region_type = "UI"
    bl_category = "Geo Location"

    def draw(self, context):
        layout = self.layout
        s = _settings(context)

        if s is None:
            layout.label(text="Settings pointer missing. Re-enable the add-on.", icon="ERROR")
            return

        box = layout.box()
        box.label(text="Terrain Objects", icon="MESH_GRID")
        box.prop(s, "terrain_name")
        box.prop(s, "data_name")
        box.prop(s, "length_tolerance")
        box.prop(s, "compensate_north_projection")
        box.prop(s, "auto_attach")

        row = layout.row(align=True)
        if ops.get_session() is None:
            row.operator("tgeo.attach_terrain", icon="LINKED")
        else:
            row.operator("tgeo.detach_terrain", icon="UNLINKED")
            row.operator("tgeo.sync_now", text="", icon="FILE_REFRESH")

        scene = context.scene
        geo = layout.box()
        geo.label(text="Geo Reference", icon="WORLD")
        geo.label(text=f"North angle: {float(scene.get(SCENE_KEY_NORTH_ANGLE, 0.0)):.3f}°")
        geo.label(text=f"Height: {float(scene.get(SCENE_KEY_HEIGHT, 0.0)):.3f}")
        geo.label(
            text=f"Lat/Long: {float(scene.get(SCENE_KEY_LATITUDE, 0.0)):.6f}, "
                 f"{float(scene.get(SCENE_KEY_LONGITUDE, 0.0)):.6f}"
        )
        geo.operator("tgeo.inspect_cursor", icon="PIVOT_CURSOR")

        log_box = layout.box()
        log_box.label(text=get_logger().get_summary(), icon="TEXT")
        log_box.prop(s, "log_export_path", text="")
        row = log_box.row(align=True)
        row.operator("tgeo.export_log", icon="EXPORT")
        row.operator("tgeo.clear_log", icon="TRASH")
