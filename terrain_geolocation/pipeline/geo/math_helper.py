"""Affine transform helpers and transform classification.

Transforms are 4x4 numpy arrays acting on column vectors:

    p' = T @ (x, y, z, 1)

so ``T[:3, 3]`` is the origin of the transformed frame and ``T[:3, i]`` its
x/y/z axes. Composition is the matrix product, ``a @ b`` applies ``b`` first.
"""

import math
from enum import Enum
from typing import List, Sequence

import numpy as np

from ...utils.common import DEFAULT_LENGTH_TOLERANCE, DEFAULT_SINGULAR_TOLERANCE
from ...utils.errors import SingularTransformError


X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])
Z_AXIS = np.array([0.0, 0.0, 1.0])
ORIGIN = np.zeros(3)


# ============================================================================
# Construction / conversion
# ============================================================================

def as_matrix(values) -> np.ndarray:
    """Build a 4x4 float matrix from a nested 4x4 sequence or 16 flat values (row-major)."""
    m = np.array(values, dtype=float)
    if m.shape == (16,):
        m = m.reshape(4, 4)
    if m.shape != (4, 4):
        raise ValueError(f"expected 4x4 or 16 values, got shape {m.shape}")
    return m


def to_flat(matrix) -> List[float]:
    """Row-major list of 16 floats, suitable for attribute persistence."""
    return [float(v) for v in np.asarray(matrix, dtype=float).reshape(16)]


def translation(vector: Sequence[float]) -> np.ndarray:
    m = np.eye(4)
    m[:3, 3] = np.asarray(vector, dtype=float)
    return m


def rotation_z(angle: float, pivot: Sequence[float] = ORIGIN) -> np.ndarray:
    """Counter-clockwise rotation about a vertical axis through ``pivot``."""
    c, s = math.cos(angle), math.sin(angle)
    m = np.eye(4)
    m[:2, :2] = [[c, -s], [s, c]]
    return about(m, pivot)


def scaling(factors, pivot: Sequence[float] = ORIGIN) -> np.ndarray:
    """Axis-aligned scale; ``factors`` is a scalar or an (sx, sy, sz) triple."""
    f = np.broadcast_to(np.asarray(factors, dtype=float), (3,))
    m = np.diag([f[0], f[1], f[2], 1.0])
    return about(m, pivot)


def about(matrix: np.ndarray, pivot: Sequence[float]) -> np.ndarray:
    """Conjugate ``matrix`` so it acts about ``pivot`` instead of the origin."""
    pivot = np.asarray(pivot, dtype=float)
    if not pivot.any():
        return matrix
    return translation(pivot) @ matrix @ translation(-pivot)


def determinant(matrix) -> float:
    return float(np.linalg.det(np.asarray(matrix, dtype=float)[:3, :3]))


def invert(matrix, context: str = "Transform", tolerance: float = DEFAULT_SINGULAR_TOLERANCE) -> np.ndarray:
    """Inverse of an affine transform.

    Raises:
        SingularTransformError: if the linear part has (near) zero determinant.
    """
    m = np.asarray(matrix, dtype=float)
    det = determinant(m)
    if not math.isfinite(det) or abs(det) <= tolerance:
        raise SingularTransformError(context, det)
    return np.linalg.inv(m)


# ============================================================================
# Frame accessors
# ============================================================================

def origin(matrix) -> np.ndarray:
    return np.array(matrix, dtype=float)[:3, 3]


def yaxis(matrix) -> np.ndarray:
    return np.array(matrix, dtype=float)[:3, 1]


def transform_point(matrix, point: Sequence[float]) -> np.ndarray:
    m = np.asarray(matrix, dtype=float)
    return m[:3, :3] @ np.asarray(point, dtype=float) + m[:3, 3]


def transform_vector(matrix, vector: Sequence[float]) -> np.ndarray:
    """Apply only the linear part (no translation)."""
    return np.asarray(matrix, dtype=float)[:3, :3] @ np.asarray(vector, dtype=float)


# ============================================================================
# Angles
# ============================================================================

def planar_angle(minuend, subtrahend, normal=Z_AXIS) -> float:
    """Counter-clockwise angle in the plane of ``normal`` from ``minuend`` to ``subtrahend``.

    Both vectors are projected to the plane first. Continuous atan2 form:
    0 for parallel vectors, +-pi for anti-parallel ones.
    """
    n = np.asarray(normal, dtype=float)
    n = n / np.linalg.norm(n)
    u = np.asarray(minuend, dtype=float)
    v = np.asarray(subtrahend, dtype=float)
    u = u - np.dot(u, n) * n
    v = v - np.dot(v, n) * n
    return math.atan2(float(np.dot(np.cross(u, v), n)), float(np.dot(u, v)))


# ============================================================================
# Classification
# ============================================================================

class TransformKind(Enum):
    IDENTITY = "identity"
    SCALING = "scaling"
    RIGID_MOTION = "rigid_motion"


def is_identity(matrix, tolerance: float = DEFAULT_LENGTH_TOLERANCE) -> bool:
    """True if every coefficient is within ``tolerance`` of the identity matrix."""
    diff = np.abs(np.asarray(matrix, dtype=float) - np.eye(4))
    return bool(np.all(diff <= tolerance))


def is_scaling(matrix, tolerance: float = DEFAULT_LENGTH_TOLERANCE) -> bool:
    """True if any unit axis changes length by more than ``tolerance``."""
    for axis in (X_AXIS, Y_AXIS, Z_AXIS):
        length = float(np.linalg.norm(transform_vector(matrix, axis)))
        if abs(length - 1.0) > tolerance:
            return True
    return False


def classify(matrix, tolerance: float = DEFAULT_LENGTH_TOLERANCE) -> TransformKind:
    """Identity first, then scaling, else rigid motion.

    A transform that both scales and moves counts as SCALING.
    """
    if is_identity(matrix, tolerance):
        return TransformKind.IDENTITY
    if is_scaling(matrix, tolerance):
        return TransformKind.SCALING
    return TransformKind.RIGID_MOTION


class TransformClassifier:
    """Classification bound to one length tolerance."""

    def __init__(self, tolerance: float = DEFAULT_LENGTH_TOLERANCE):
        self.tolerance = tolerance

    def is_identity(self, matrix) -> bool:
        return is_identity(matrix, self.tolerance)

    def is_scaling(self, matrix) -> bool:
        return is_scaling(matrix, self.tolerance)

    def classify(self, matrix) -> TransformKind:
        return classify(matrix, self.tolerance)
