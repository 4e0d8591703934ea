"""Deferred execution on Blender's timer loop."""

import traceback

try:
    import bpy  # type: ignore
except ModuleNotFoundError as exc:
    raise ImportError("bpy not found; run this add-on inside Blender.") from exc

from ...utils.logging_system import log_error
from ..sync.observer_bridge import TaskQueue
from .interfaces import Scheduler


class BlenderTimerScheduler(Scheduler):
    """Queues callbacks and drains them from a zero-interval bpy.app.timers callback."""

    def __init__(self):
        self.queue = TaskQueue()
        self._tick_fn = self._tick

    def defer(self, callback):
        self.queue.enqueue(callback)
        if not bpy.app.timers.is_registered(self._tick_fn):
            bpy.app.timers.register(self._tick_fn, first_interval=0.0)

    def _tick(self):
        try:
            self.queue.drain()
        except Exception as ex:
            log_error(f"[Observer] deferred task failed: {ex}")
            traceback.print_exc()
            self.queue.clear()
        return None  # one-shot

    def cancel(self):
        self.queue.clear()
        if bpy.app.timers.is_registered(self._tick_fn):
            bpy.app.timers.unregister(self._tick_fn)
