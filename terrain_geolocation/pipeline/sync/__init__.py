"""
pipeline/sync: one synchronization cycle per viewport change.

Public API:
- ChangeCoordinator.on_change() -> CycleResult
- ObserverBridge.on_change_entity(...) (notification callback)
- TerrainSync: attach/detach/sync_now over one set of host collaborators
"""

from .coordinator import ChangeCoordinator, CycleResult, SyncState, TerrainHandles, operation
from .observer_bridge import ObserverBridge, TaskQueue
from .session import TerrainSync

__all__ = [
    "ChangeCoordinator",
    "CycleResult",
    "SyncState",
    "TerrainHandles",
    "operation",
    "ObserverBridge",
    "TaskQueue",
    "TerrainSync",
]
