"""
Terrain sync operators: attach/detach tracking, run a cycle, inspect the cursor.
"""

import traceback

import bpy
from bpy.types import Operator

from ... import ops
from ...utils.errors import TerrainNotConfiguredError, TerrainSyncError
from ...utils.logging_system import log_error


class TGEO_OT_AttachTerrain(Operator):
    """Start tracking the terrain object and keep the geo location in sync with it."""
    bl_idname = "tgeo.attach_terrain"
    bl_label = "Attach Terrain Tracking"
    bl_options = {"REGISTER"}

    def execute(self, context):
        try:
            ops.attach(context)
        except TerrainNotConfiguredError as ex:
            self.report({"ERROR"}, str(ex))
            return {"CANCELLED"}
        except TerrainSyncError as ex:
            self.report({"ERROR"}, f"Attach failed: {ex}")
            return {"CANCELLED"}
        self.report({"INFO"}, "Terrain tracking attached ✓")
        return {"FINISHED"}


class TGEO_OT_DetachTerrain(Operator):
    bl_idname = "tgeo.detach_terrain"
    bl_label = "Detach Terrain Tracking"
    bl_options = {"REGISTER"}

    def execute(self, context):
        ops.detach()
        self.report({"INFO"}, "Terrain tracking detached.")
        return {"FINISHED"}


class TGEO_OT_SyncNow(Operator):
    """Apply the terrain's pending transform change right away."""
    bl_idname = "tgeo.sync_now"
    bl_label = "Sync Terrain Now"
    bl_options = {"REGISTER"}

    @classmethod
    def poll(cls, context):
        return ops.get_session() is not None

    def execute(self, context):
        try:
            result = ops.get_session().sync_now()
        except Exception as ex:
            log_error(f"[Sync] unexpected failure: {ex}")
            traceback.print_exc()
            self.report({"ERROR"}, f"Sync failed: {ex}")
            return {"CANCELLED"}
        if result is None:
            self.report({"WARNING"}, "Sync did not run (see log).")
            return {"CANCELLED"}
        self.report({"INFO"}, f"Sync: {result.state.value}")
        return {"FINISHED"}


class TGEO_OT_InspectCursor(Operator):
    """Report position, lat/long, UTM and height of the 3D cursor."""
    bl_idname = "tgeo.inspect_cursor"
    bl_label = "Inspect 3D Cursor Geo Location"
    bl_options = {"REGISTER"}

    @classmethod
    def poll(cls, context):
        return ops.get_session() is not None

    def execute(self, context):
        session = ops.get_session()
        try:
            text = session.geo.describe_point(tuple(context.scene.cursor.location))
        except TerrainSyncError as ex:
            self.report({"ERROR"}, str(ex))
            return {"CANCELLED"}
        for line in text.strip().splitlines():
            self.report({"INFO"}, line)
        return {"FINISHED"}
