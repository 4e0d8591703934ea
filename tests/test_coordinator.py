import math

import numpy as np
import pytest

from terrain_geolocation.pipeline.geo import math_helper as mh
from terrain_geolocation.pipeline.geo.projection import LatLong, latlong_to_utm
from terrain_geolocation.pipeline.sync.coordinator import SyncState, operation
from terrain_geolocation.utils.errors import SingularTransformError

from fakes import STOCKHOLM, FakeGeoStore, FakeHost, FakeTransaction, terrain_data_edges, world_bounds


def test_scaling_recrops_viewport(scene):
    scene.viewport.matrix = mh.scaling((2.0, 2.0, 1.0))
    result = scene.sync.coordinator.on_change()

    assert result.state is SyncState.RECROPPING
    world = world_bounds(scene.viewport)
    assert np.allclose(world.min, [-10, -10, -3])
    assert np.allclose(world.max, [10, 10, 7])
    assert np.array_equal(scene.source.matrix, np.eye(4))
    assert scene.geo_store.writes == 0
    assert scene.transaction.events == [("start", "Update Terrain"), ("commit",)]
    assert scene.transaction.undo_steps == ["Update Terrain"]


def test_rotation_relocates_geo_reference_and_terrain_data(scene):
    edges_before = list(scene.viewport.edges)
    rotation = mh.rotation_z(math.radians(30))
    scene.viewport.matrix = rotation
    result = scene.sync.coordinator.on_change()

    assert result.state is SyncState.RELOCATING
    assert scene.geo_store.north == pytest.approx(-30.0)
    assert scene.geo_store.latlong == pytest.approx(STOCKHOLM, abs=1e-9)
    assert np.allclose(scene.source.matrix, rotation)
    assert scene.viewport.edges == edges_before
    assert not [c for c in scene.host.calls if c[0] == "clear_content"]
    assert len(scene.transaction.commits) == 1


def test_translation_relocates_origin(scene):
    before = latlong_to_utm(LatLong(*STOCKHOLM))
    scene.viewport.matrix = mh.translation((5.0, 0.0, 0.0))
    result = scene.sync.coordinator.on_change()

    assert result.state is SyncState.RELOCATING
    after = latlong_to_utm(LatLong(*scene.geo_store.latlong), zone=before.zone, hemisphere=before.hemisphere)
    assert after.easting - before.easting == pytest.approx(-5.0, abs=1e-6)
    assert after.northing == pytest.approx(before.northing, abs=1e-6)
    assert scene.geo_store.height == 0.0
    assert np.allclose(scene.source.matrix, mh.translation((5.0, 0.0, 0.0)))


def test_no_change_is_a_committed_no_op(scene):
    result = scene.sync.coordinator.on_change()
    assert result.state is SyncState.NO_OP
    assert not result.stale
    assert scene.geo_store.writes == 0
    assert scene.transaction.events == [("start", "Update Terrain"), ("commit",)]
    assert scene.transaction.undo_steps == []


def test_sub_tolerance_change_is_no_op(scene):
    scene.viewport.matrix = mh.translation((1e-4, 0.0, 0.0))
    assert scene.sync.coordinator.on_change().state is SyncState.NO_OP


def test_scale_and_move_counts_as_scaling(scene):
    scene.viewport.matrix = mh.translation((3.0, 0.0, 0.0)) @ mh.scaling(2.0)
    result = scene.sync.coordinator.on_change()
    assert result.state is SyncState.RECROPPING
    assert scene.geo_store.writes == 0
    assert np.array_equal(scene.source.matrix, np.eye(4))


def test_consecutive_cycles_use_fresh_baseline(scene):
    scene.viewport.matrix = mh.translation((5.0, 0.0, 0.0))
    scene.sync.coordinator.on_change()
    scene.viewport.matrix = mh.translation((5.0, 0.0, 0.0)) @ scene.viewport.matrix
    scene.sync.coordinator.on_change()
    assert np.allclose(scene.source.matrix, mh.translation((10.0, 0.0, 0.0)))


def test_failure_aborts_every_change(scene):
    scene.host.fail_set_transform_for = "Terrain Data"
    scene.viewport.matrix = mh.translation((5.0, 0.0, 0.0))

    with pytest.raises(RuntimeError, match="refused"):
        scene.sync.coordinator.on_change()

    assert scene.transaction.aborts and not scene.transaction.commits
    assert scene.geo_store.north == 0.0
    assert scene.geo_store.latlong == STOCKHOLM
    assert np.array_equal(scene.source.matrix, np.eye(4))
    assert scene.sync.coordinator.state is SyncState.IDLE
    stored = scene.viewport.attributes["terrain_geolocation"]["transformation"]
    assert np.allclose(mh.as_matrix(stored), scene.viewport.matrix)

    # The failed motion is consumed; only later edits are synced.
    scene.host.fail_set_transform_for = None
    assert scene.sync.coordinator.on_change().state is SyncState.NO_OP
    scene.viewport.matrix = mh.translation((1.0, 0.0, 0.0)) @ scene.viewport.matrix
    assert scene.sync.coordinator.on_change().state is SyncState.RELOCATING
    assert np.allclose(scene.source.matrix, mh.translation((1.0, 0.0, 0.0)))


def test_singular_viewport_aborts_recrop(scene):
    edges_before = list(scene.viewport.edges)
    scene.viewport.matrix = mh.scaling((1.0, 1.0, 0.0))

    with pytest.raises(SingularTransformError):
        scene.sync.coordinator.on_change()

    assert scene.viewport.edges == edges_before
    assert len(scene.transaction.aborts) == 1
    assert scene.sync.coordinator.state is SyncState.IDLE
    stored = scene.viewport.attributes["terrain_geolocation"]["transformation"]
    assert np.allclose(mh.as_matrix(stored), scene.viewport.matrix)
    assert scene.host.pending_updates == []


def test_missing_object_is_a_stale_no_op(scene):
    scene.host.erase(scene.source)
    result = scene.sync.coordinator.on_change()
    assert result.state is SyncState.NO_OP
    assert result.stale
    assert scene.transaction.events == []


def test_replaced_object_is_resolved_again(scene):
    scene.host.erase(scene.source)
    replacement = scene.host.add_object("Terrain Data", edges=terrain_data_edges())
    scene.viewport.matrix = mh.translation((0.0, 2.0, 0.0))
    assert scene.sync.coordinator.on_change().state is SyncState.RELOCATING
    assert np.allclose(replacement.matrix, mh.translation((0.0, 2.0, 0.0)))


def test_operation_commits_or_aborts():
    host = FakeHost()
    transaction = FakeTransaction(host, FakeGeoStore())
    with operation(transaction, "ok"):
        pass
    with pytest.raises(KeyError):
        with operation(transaction, "broken"):
            raise KeyError("x")
    assert transaction.events == [("start", "ok"), ("commit",), ("start", "broken"), ("abort",)]
