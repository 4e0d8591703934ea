"""
Export and logging operators for the terrain geo-location add-on.
"""

from datetime import datetime
from pathlib import Path

import bpy
from bpy.types import Operator

from ...utils.logging_system import get_logger


def _settings(context):
    return getattr(context.scene, "terrain_geolocation_settings", None)


class TGEO_OT_ExportLog(Operator):
    bl_idname = "tgeo.export_log"
    bl_label = "Export Log (.txt)"
    bl_options = {"REGISTER"}

    def execute(self, context):
        try:
            s = _settings(context)
            raw = getattr(s, "log_export_path", "") if s else ""
            if raw.strip():
                log_path = Path(bpy.path.abspath(raw))
            else:
                timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
                log_path = Path(bpy.app.tempdir or ".") / f"TGEO_Session_{timestamp}.txt"
            log_path.parent.mkdir(parents=True, exist_ok=True)

            get_logger().export_txt(log_path)
            self.report({"INFO"}, f"Log exported to {log_path}")
            return {"FINISHED"}
        except OSError as ex:
            self.report({"ERROR"}, f"Export log failed: {ex}")
            return {"CANCELLED"}


class TGEO_OT_ClearLog(Operator):
    bl_idname = "tgeo.clear_log"
    bl_label = "Clear Log"
    bl_options = {"REGISTER"}

    def execute(self, context):
        get_logger().clear()
        self.report({"INFO"}, "Log cleared.")
        return {"FINISHED"}
