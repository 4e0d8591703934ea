import numpy as np
import pytest

from terrain_geolocation.pipeline.geo.math_helper import rotation_z, translation
from terrain_geolocation.pipeline.terrain.bounds import BoundingBox


def test_empty_box():
    box = BoundingBox()
    assert box.empty
    assert not box.contains((0, 0, 0))
    with pytest.raises(ValueError):
        box.min


def test_from_points_and_contains_with_tolerance():
    box = BoundingBox.from_points([(0, 0, 0), (2, 4, 1), (-1, 1, 3)])
    assert box.min.tolist() == [-1, 0, 0]
    assert box.max.tolist() == [2, 4, 3]
    assert box.contains((2, 4, 3))
    assert not box.contains((2.01, 0, 0))
    assert box.contains((2.01, 0, 0), tolerance=0.02)


def test_with_z_range_keeps_footprint():
    box = BoundingBox((-5, -5, 0), (5, 5, 0)).with_z_range(-3, 7)
    assert box.min.tolist() == [-5, -5, -3]
    assert box.max.tolist() == [5, 5, 7]


def test_contains_footprint_ignores_z():
    outer = BoundingBox((-5, -5, 0), (5, 5, 0))
    assert outer.contains_footprint(BoundingBox((-5, -1, -100), (4, 5, 100)))
    assert not outer.contains_footprint(BoundingBox((-6, 0, 0), (0, 0, 0)))


def test_transformed_box():
    box = BoundingBox((0, 0, 0), (2, 1, 1)).transformed(translation((10, 0, 0)) @ rotation_z(np.pi / 2))
    assert np.allclose(box.min, [9, 0, 0])
    assert np.allclose(box.max, [10, 2, 1])
