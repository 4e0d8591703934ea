"""Axis-aligned bounding boxes."""

from typing import Iterable, Optional, Sequence

import numpy as np


class BoundingBox:
    """Min/max point pair in one frame. An empty box has no points."""

    __slots__ = ("_min", "_max")

    def __init__(self, min_point: Optional[Sequence[float]] = None, max_point: Optional[Sequence[float]] = None):
        self._min = None
        self._max = None
        if min_point is not None:
            self.add(min_point)
        if max_point is not None:
            self.add(max_point)

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]]) -> "BoundingBox":
        box = cls()
        for p in points:
            box.add(p)
        return box

    @property
    def empty(self) -> bool:
        return self._min is None

    @property
    def min(self) -> np.ndarray:
        if self.empty:
            raise ValueError("empty bounding box has no min")
        return self._min.copy()

    @property
    def max(self) -> np.ndarray:
        if self.empty:
            raise ValueError("empty bounding box has no max")
        return self._max.copy()

    @property
    def size(self) -> np.ndarray:
        return self.max - self.min

    def add(self, point: Sequence[float]) -> "BoundingBox":
        p = np.asarray(point, dtype=float).reshape(3)
        if self._min is None:
            self._min = p.copy()
            self._max = p.copy()
        else:
            self._min = np.minimum(self._min, p)
            self._max = np.maximum(self._max, p)
        return self

    def with_z_range(self, min_z: float, max_z: float) -> "BoundingBox":
        """Same horizontal footprint, vertical extent replaced."""
        lo, hi = self.min, self.max
        lo[2], hi[2] = min_z, max_z
        return BoundingBox(lo, hi)

    def contains(self, point: Sequence[float], tolerance: float = 0.0) -> bool:
        if self.empty:
            return False
        p = np.asarray(point, dtype=float).reshape(3)
        return bool(np.all(p >= self._min - tolerance) and np.all(p <= self._max + tolerance))

    def contains_footprint(self, other: "BoundingBox", tolerance: float = 0.0) -> bool:
        """True if ``other``'s X/Y rectangle lies inside this one's."""
        if self.empty or other.empty:
            return other.empty
        return bool(
            np.all(other._min[:2] >= self._min[:2] - tolerance)
            and np.all(other._max[:2] <= self._max[:2] + tolerance)
        )

    def corners(self) -> np.ndarray:
        lo, hi = self.min, self.max
        return np.array([
            [x, y, z]
            for x in (lo[0], hi[0])
            for y in (lo[1], hi[1])
            for z in (lo[2], hi[2])
        ])

    def transformed(self, matrix) -> "BoundingBox":
        """Axis-aligned bounds of this box's corners under ``matrix``."""
        if self.empty:
            return BoundingBox()
        m = np.asarray(matrix, dtype=float)
        return BoundingBox.from_points(self.corners() @ m[:3, :3].T + m[:3, 3])

    def __eq__(self, other):
        if not isinstance(other, BoundingBox):
            return NotImplemented
        if self.empty or other.empty:
            return self.empty and other.empty
        return bool(np.array_equal(self._min, other._min) and np.array_equal(self._max, other._max))

    def __repr__(self):
        if self.empty:
            return "BoundingBox(empty)"
        return f"BoundingBox(min={self._min.tolist()}, max={self._max.tolist()})"
