"""
Runtime helpers shared by operators and handlers.

One TerrainSync session exists per Blender process (one open document at a
time). It is rebuilt from the scene settings on every attach.
"""

import bpy
from bpy.app.handlers import persistent

from .pipeline.host.blender_host import BlenderGeoStore, BlenderHost, BlenderNotifications, BlenderTransaction
from .pipeline.host.blender_scheduler import BlenderTimerScheduler
from .pipeline.sync.session import TerrainSync
from .utils.common import SyncConfig
from .utils.errors import TerrainNotConfiguredError
from .utils.logging_system import log_info, log_warn


_session = None
_notifications = BlenderNotifications()
_scheduler = BlenderTimerScheduler()


def _settings(context):
    return getattr(context.scene, "terrain_geolocation_settings", None)


def config_from_context(context) -> SyncConfig:
    s = _settings(context)
    return s.to_config() if s is not None else SyncConfig()


def get_session():
    return _session


def build_session(config: SyncConfig) -> TerrainSync:
    host = BlenderHost(config)
    return TerrainSync(
        host,
        host,
        BlenderGeoStore(),
        BlenderTransaction(host, config),
        _notifications,
        _scheduler,
        config,
    )


def attach(context) -> TerrainSync:
    """(Re)attach terrain tracking for the current scene.

    Raises:
        TerrainNotConfiguredError: if the terrain objects are missing.
    """
    global _session
    detach()
    session = build_session(config_from_context(context))
    session.attach()
    _session = session
    return session


def detach():
    global _session
    if _session is not None:
        _session.detach()
        _session = None
    _scheduler.cancel()
    _notifications.clear()


@persistent
def on_load_post(*_args):
    """Attach to the freshly loaded file, like a new-model/open-model observer."""
    context = bpy.context
    s = _settings(context)
    if s is not None and not s.auto_attach:
        detach()
        return
    try:
        attach(context)
    except TerrainNotConfiguredError as ex:
        detach()
        log_warn(str(ex))


def register_handlers():
    if on_load_post not in bpy.app.handlers.load_post:
        bpy.app.handlers.load_post.append(on_load_post)
    log_info("[Sync] load handler registered")


def unregister_handlers():
    if on_load_post in bpy.app.handlers.load_post:
        bpy.app.handlers.load_post.remove(on_load_post)
    detach()
