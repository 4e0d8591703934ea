"""
Change Coordinator

One synchronization cycle, run inside a single host operation:

    IDLE -> COMPUTING -> NO_OP | RELOCATING | RECROPPING -> IDLE

- the change of the viewport transform since the last cycle is classified,
- identity: nothing to do,
- scaling: the viewport is re-cropped from the terrain data,
- rigid motion: the geo-reference follows the motion and the terrain data is
  moved along with the viewport.

Any exception inside the cycle aborts the whole operation. The tracked
baseline is then re-captured from the viewport, so a failed change is
reported once and not retried. A NO_OP cycle commits without an undo step.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from ...utils.common import SyncConfig
from ...utils.logging_system import log_error, log_info, log_warn
from ..geo.math_helper import TransformClassifier, TransformKind
from ..terrain.terrain_crop import CropResult, TerrainCropEngine
from ..terrain.tracking import TransformTracker


class SyncState(Enum):
    IDLE = "IDLE"
    COMPUTING = "COMPUTING"
    NO_OP = "NO_OP"
    RELOCATING = "RELOCATING"
    RECROPPING = "RECROPPING"


@dataclass
class CycleResult:
    state: SyncState
    change: np.ndarray = field(default_factory=lambda: np.eye(4))
    crop: Optional[CropResult] = None
    stale: bool = False


class OperationScope:
    """Yielded by operation(). Clear ``record_undo`` when the block wrote nothing."""

    def __init__(self, name: str):
        self.name = name
        self.record_undo = True


@contextmanager
def operation(transaction, name: str):
    """Run the block as one undo step; abort and re-raise on any failure."""
    transaction.start(name)
    scope = OperationScope(name)
    try:
        yield scope
    except BaseException:
        transaction.abort()
        raise
    transaction.commit(record_undo=scope.record_undo)


class TerrainHandles:
    """Resolves the viewport and terrain data objects by name.

    Handles are re-resolved whenever a cached one became invalid.
    """

    def __init__(self, host, config: SyncConfig = None):
        self.host = host
        self.config = config or SyncConfig()
        self._viewport = None
        self._source = None

    def _refresh(self, cached, name):
        if cached is not None and self.host.is_valid(cached):
            return cached
        return self.host.find_object(name)

    def resolve(self) -> Optional[Tuple[object, object]]:
        """(viewport, source) or None if either is missing."""
        self._viewport = self._refresh(self._viewport, self.config.terrain_name)
        self._source = self._refresh(self._source, self.config.data_name)
        if self._viewport is None or self._source is None:
            return None
        return self._viewport, self._source

    def missing(self):
        names = []
        if self._viewport is None:
            names.append(self.config.terrain_name)
        if self._source is None:
            names.append(self.config.data_name)
        return names


class ChangeCoordinator:

    def __init__(self, host, attributes, geo_model, transaction, config: SyncConfig = None,
                 handles: TerrainHandles = None):
        self.host = host
        self.config = config or SyncConfig()
        self.geo = geo_model
        self.transaction = transaction
        self.handles = handles or TerrainHandles(host, self.config)
        self.tracker = TransformTracker(host, attributes, self.config)
        self.classifier = TransformClassifier(self.config.length_tolerance)
        self.crop_engine = TerrainCropEngine(host, self.config)
        self.state = SyncState.IDLE
        self.last_result: Optional[CycleResult] = None

    def _rebase(self, viewport):
        # Abort rolled the baseline back; the viewport keeps its transform.
        # Baseline must equal the current transform after every cycle.
        if not self.host.is_valid(viewport):
            return
        self.tracker.init_transform_tracking(viewport)
        log_warn("[Sync] baseline re-captured after abort; geo-reference left unchanged")

    def on_change(self) -> CycleResult:
        """Run one cycle for the current viewport transform."""
        handles = self.handles.resolve()
        if handles is None:
            log_warn(f"[Sync] skipped, objects gone: {', '.join(self.handles.missing())}")
            self.last_result = CycleResult(SyncState.NO_OP, stale=True)
            return self.last_result
        viewport, source = handles

        self.state = SyncState.COMPUTING
        result = None
        try:
            with operation(self.transaction, self.config.operation_name) as scope:
                change = self.tracker.delta(viewport)
                kind = self.classifier.classify(change)
                if kind is TransformKind.IDENTITY:
                    scope.record_undo = False
                    result = CycleResult(SyncState.NO_OP, change)
                elif kind is TransformKind.SCALING:
                    self.state = SyncState.RECROPPING
                    crop = self.crop_engine.crop(source, viewport)
                    result = CycleResult(SyncState.RECROPPING, change, crop=crop)
                else:
                    self.state = SyncState.RELOCATING
                    self.geo.move_earth(change)
                    # Terrain data follows the viewport to the new geo location.
                    self.host.transform_by(source, change)
                    result = CycleResult(SyncState.RELOCATING, change)
        except Exception as ex:
            log_error(f"[Sync] cycle aborted in state {self.state.value}: {ex}")
            self._rebase(viewport)
            raise
        finally:
            self.state = SyncState.IDLE

        log_info(f"[Sync] cycle={result.state.value}")
        self.last_result = result
        return result
