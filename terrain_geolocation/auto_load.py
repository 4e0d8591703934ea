"""Ordered class registration for the terrain geo-location add-on.

register(classes) registers in the given order and remembers what actually
got registered; unregister() walks that record backwards. A class that fails
to register is logged and skipped, so a half-registered add-on can still be
disabled cleanly.
"""

import traceback
from typing import List, Sequence

import bpy

from .utils.logging_system import log_error, log_info

_registered: List[type] = []


def register(classes: Sequence[type] = ()):
    global _registered
    _registered = []
    failed = []
    for cls in classes:
        if getattr(cls, "is_registered", False):
            # Left over from a reload without unregister.
            bpy.utils.unregister_class(cls)
        try:
            bpy.utils.register_class(cls)
        except (RuntimeError, ValueError) as ex:
            failed.append(cls.__name__)
            log_error(f"[Addon] register_class({cls.__name__}) failed: {ex}")
            traceback.print_exc()
            continue
        _registered.append(cls)
    log_info(f"[Addon] registered {len(_registered)} classes" + (f", failed: {', '.join(failed)}" if failed else ""))


def unregister():
    global _registered
    while _registered:
        cls = _registered.pop()
        try:
            bpy.utils.unregister_class(cls)
        except RuntimeError as ex:
            log_error(f"[Addon] unregister_class({cls.__name__}) failed: {ex}")
