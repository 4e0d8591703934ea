"""
Host collaborator interfaces.

The sync core never talks to Blender directly. Everything it needs from the
host goes through these abstract classes; pipeline/host/blender_host.py
implements them with bpy/bmesh, tests implement them in memory.

Handles are opaque host objects (for Blender: bpy.types.Object).
Transforms are 4x4 numpy arrays in the parent (world) frame.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional, Sequence, Tuple

import numpy as np

from ..terrain.bounds import BoundingBox


Handle = Any
Edge = Tuple[Any, np.ndarray, np.ndarray]  # (edge id, start, end) in the container's local frame


class GeometryHost(ABC):
    """Scene-graph primitives."""

    @abstractmethod
    def find_object(self, name: str) -> Optional[Handle]:
        """Top-level object with ``name`` or None."""

    @abstractmethod
    def is_valid(self, handle: Handle) -> bool:
        """False once the object was deleted or replaced."""

    @abstractmethod
    def get_transform(self, handle: Handle) -> np.ndarray:
        ...

    @abstractmethod
    def set_transform(self, handle: Handle, matrix: np.ndarray) -> None:
        ...

    def transform_by(self, handle: Handle, matrix: np.ndarray) -> None:
        """Apply ``matrix`` on top of the object's current transform."""
        self.set_transform(handle, np.asarray(matrix, dtype=float) @ self.get_transform(handle))

    @abstractmethod
    def content_bounds(self, handle: Handle) -> BoundingBox:
        """Bounds of the object's content in its own local frame."""

    @abstractmethod
    def clear_content(self, handle: Handle) -> None:
        ...

    @abstractmethod
    def copy_content(self, source: Handle, target: Handle, matrix: np.ndarray) -> None:
        """Instance ``source``'s content into ``target`` at ``matrix`` and flatten it to loose geometry."""

    @abstractmethod
    def add_group(self, container: Handle) -> Handle:
        """Empty child group sharing ``container``'s local frame."""

    @abstractmethod
    def add_face(self, group: Handle, points: Sequence[Sequence[float]]) -> Any:
        ...

    @abstractmethod
    def face_normal(self, face: Any) -> np.ndarray:
        ...

    @abstractmethod
    def reverse_face(self, face: Any) -> None:
        ...

    @abstractmethod
    def pushpull(self, face: Any, distance: float) -> None:
        """Extrude ``face`` along its normal by ``distance``."""

    @abstractmethod
    def intersect_with(self, container: Handle, solid: Handle) -> None:
        """Boolean-intersect ``container``'s content with the closed ``solid``, in place."""

    @abstractmethod
    def edges(self, container: Handle) -> Iterable[Edge]:
        ...

    @abstractmethod
    def erase_edges(self, container: Handle, edge_ids: Iterable[Any]) -> None:
        ...

    @abstractmethod
    def erase(self, handle: Handle) -> None:
        ...


class AttributeStore(ABC):
    """Per-object named key/value persistence."""

    @abstractmethod
    def get_attribute(self, handle: Handle, namespace: str, key: str, default=None):
        ...

    @abstractmethod
    def set_attribute(self, handle: Handle, namespace: str, key: str, value) -> None:
        ...


class GeoReferenceStore(ABC):
    """Document-level geo-reference fields. The north angle is stored in degrees."""

    @abstractmethod
    def get_north_angle_degrees(self) -> float:
        ...

    @abstractmethod
    def set_north_angle_degrees(self, value: float) -> None:
        ...

    @abstractmethod
    def get_height(self) -> float:
        ...

    @abstractmethod
    def set_height(self, value: float) -> None:
        ...

    @abstractmethod
    def get_latlong(self) -> Tuple[float, float]:
        ...

    @abstractmethod
    def set_latlong(self, latitude: float, longitude: float) -> None:
        ...


class Transaction(ABC):
    """One named, undo-grouped edit scope."""

    @abstractmethod
    def start(self, name: str) -> None:
        ...

    @abstractmethod
    def commit(self, record_undo: bool = True) -> None:
        """Keep the changes; push an undo step unless ``record_undo`` is False."""

    @abstractmethod
    def abort(self) -> None:
        """Roll back everything changed since start()."""


class NotificationSource(ABC):
    """Fires a callback whenever a watched object changes. Carries no delta."""

    @abstractmethod
    def add_observer(self, handle: Handle, callback: Callable[[Handle], None]) -> None:
        ...

    @abstractmethod
    def remove_observer(self, handle: Handle, callback: Callable[[Handle], None]) -> None:
        ...


class Scheduler(ABC):
    """Runs callbacks on a later cooperative tick."""

    @abstractmethod
    def defer(self, callback: Callable[[], None]) -> None:
        ...
