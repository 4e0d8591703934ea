"""
Operations Package: Blender operators for the terrain geo-location add-on.

- sync_ops.py: attach/detach tracking, sync now, inspect 3D cursor
- export_log_ops.py: export/clear the session log
"""

from .sync_ops import (
    TGEO_OT_AttachTerrain,
    TGEO_OT_DetachTerrain,
    TGEO_OT_SyncNow,
    TGEO_OT_InspectCursor,
)

from .export_log_ops import (
    TGEO_OT_ExportLog,
    TGEO_OT_ClearLog,
)

__all__ = [
    "TGEO_OT_AttachTerrain",
    "TGEO_OT_DetachTerrain",
    "TGEO_OT_SyncNow",
    "TGEO_OT_InspectCursor",
    "TGEO_OT_ExportLog",
    "TGEO_OT_ClearLog",
]
