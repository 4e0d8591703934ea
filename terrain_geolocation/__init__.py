bl_info = {
    "name": "Terrain Geo Location",
    "author": "akhai-labs",
    "version": (1, 0, 0),
    "blender": (4, 2, 0),
    "location": "View3D > Sidebar > Geo Location",
    "description": "Move or rotate the terrain to change the geo location, scale it to show more or less terrain.",
    "category": "Object",
}

# Blender modules are imported inside register() so the sync core
# (terrain_geolocation.pipeline.geo/terrain/sync) stays importable outside Blender.


def _classes():
    from .settings import TGEOSettings
    from .pipeline.operations import (
        TGEO_OT_AttachTerrain,
        TGEO_OT_DetachTerrain,
        TGEO_OT_SyncNow,
        TGEO_OT_InspectCursor,
        TGEO_OT_ExportLog,
        TGEO_OT_ClearLog,
    )
    from .ui import TGEO_PT_GeoLocation

    # Register order matters: settings first, panel last.
    return (
        TGEOSettings,
        TGEO_OT_AttachTerrain,
        TGEO_OT_DetachTerrain,
        TGEO_OT_SyncNow,
        TGEO_OT_InspectCursor,
        TGEO_OT_ExportLog,
        TGEO_OT_ClearLog,
        TGEO_PT_GeoLocation,
    )


def register():
    import bpy
    from . import auto_load, ops
    from .settings import TGEOSettings

    auto_load.register(_classes())
    bpy.types.Scene.terrain_geolocation_settings = bpy.props.PointerProperty(type=TGEOSettings)
    ops.register_handlers()


def unregister():
    import bpy
    from . import auto_load, ops

    ops.unregister_handlers()
    if hasattr(bpy.types.Scene, "terrain_geolocation_settings"):
        del bpy.types.Scene.terrain_geolocation_settings
    auto_load.unregister()


if __name__ == "__main__":
    register()
