import math

import numpy as np
import pytest

from terrain_geolocation.pipeline.geo import math_helper as mh
from terrain_geolocation.pipeline.geo.math_helper import TransformClassifier, TransformKind
from terrain_geolocation.utils.errors import SingularTransformError


TOL = 1e-3


def random_rigid(rng):
    axis = rng.normal(size=3)
    axis /= np.linalg.norm(axis)
    angle = rng.uniform(-math.pi, math.pi)
    # Rodrigues
    k = np.array([[0, -axis[2], axis[1]], [axis[2], 0, -axis[0]], [-axis[1], axis[0], 0]])
    r = np.eye(3) + math.sin(angle) * k + (1 - math.cos(angle)) * k @ k
    m = np.eye(4)
    m[:3, :3] = r
    m[:3, 3] = rng.uniform(-100, 100, size=3)
    return m


def test_is_identity_tolerates_round_off():
    m = np.eye(4)
    m[0, 3] = 0.5 * TOL
    m[1, 1] = 1.0 + 0.5 * TOL
    assert mh.is_identity(m, TOL)


def test_is_identity_rejects_any_coefficient_beyond_tolerance():
    for i in range(4):
        for j in range(4):
            m = np.eye(4)
            m[i, j] += 2 * TOL
            assert not mh.is_identity(m, TOL), (i, j)


def test_round_trip_through_inverse_is_identity():
    rng = np.random.default_rng(7)
    for _ in range(20):
        m = random_rigid(rng) @ mh.scaling(rng.uniform(0.5, 3.0, size=3))
        assert mh.is_identity(m @ mh.invert(m), TOL)


def test_rigid_motions_are_not_scaling():
    rng = np.random.default_rng(11)
    for _ in range(50):
        m = random_rigid(rng)
        assert not mh.is_scaling(m, TOL)
        assert mh.classify(m, TOL) in (TransformKind.RIGID_MOTION, TransformKind.IDENTITY)


@pytest.mark.parametrize("factors", [(2, 2, 2), (2, 1, 1), (1, 1, 0.5), (1, 1 + 2 * TOL, 1)])
def test_axis_length_change_is_scaling(factors):
    m = mh.translation((3, 4, 5)) @ mh.rotation_z(0.3) @ mh.scaling(factors)
    assert mh.is_scaling(m, TOL)
    assert mh.classify(m, TOL) is TransformKind.SCALING


def test_shear_with_scale_is_scaling():
    m = np.eye(4)
    m[0, 1] = 0.5  # y axis maps to (0.5, 1, 0)
    assert mh.is_scaling(m, TOL)


def test_classification_order():
    c = TransformClassifier(TOL)
    assert c.classify(np.eye(4)) is TransformKind.IDENTITY
    assert c.classify(mh.translation((5, 0, 0))) is TransformKind.RIGID_MOTION
    assert c.classify(mh.rotation_z(math.radians(30))) is TransformKind.RIGID_MOTION
    # Scaled and moved at once counts as scaling.
    assert c.classify(mh.translation((5, 0, 0)) @ mh.scaling(2)) is TransformKind.SCALING


def test_planar_angle_sign_and_continuity():
    y = mh.Y_AXIS
    assert mh.planar_angle(y, y) == 0.0
    assert mh.planar_angle(mh.X_AXIS, y) == pytest.approx(math.pi / 2)
    assert mh.planar_angle(y, mh.X_AXIS) == pytest.approx(-math.pi / 2)
    assert abs(mh.planar_angle(y, -y)) == pytest.approx(math.pi)
    rotated = mh.transform_vector(mh.rotation_z(math.radians(30)), y)
    assert mh.planar_angle(rotated, y) == pytest.approx(math.radians(-30))


def test_planar_angle_ignores_out_of_plane_component():
    u = np.array([0.0, 1.0, 5.0])
    v = np.array([-1.0, 0.0, -2.0])
    assert mh.planar_angle(u, v) == pytest.approx(math.pi / 2)


def test_invert_rejects_singular():
    with pytest.raises(SingularTransformError) as info:
        mh.invert(mh.scaling((1, 0, 1)), context="Test")
    assert info.value.context == "Test"


def test_flat_round_trip_and_shape_check():
    m = mh.translation((1, 2, 3)) @ mh.rotation_z(0.7)
    assert np.allclose(mh.as_matrix(mh.to_flat(m)), m)
    with pytest.raises(ValueError):
        mh.as_matrix([1.0, 2.0, 3.0])


def test_rotation_about_pivot_keeps_pivot_fixed():
    pivot = (10.0, -4.0, 2.0)
    m = mh.rotation_z(1.1, pivot)
    assert np.allclose(mh.transform_point(m, pivot), pivot)
