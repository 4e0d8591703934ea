import numpy as np
import pytest

from terrain_geolocation.pipeline.geo import math_helper as mh
from terrain_geolocation.pipeline.sync.coordinator import SyncState
from terrain_geolocation.utils.common import SyncConfig
from terrain_geolocation.utils.errors import TerrainNotConfiguredError

from fakes import build_scene


def test_attach_starts_tracking_in_one_operation():
    scene = build_scene(attach=False)
    scene.viewport.matrix = mh.translation((4.0, 0.0, 0.0))

    assert scene.sync.attach() is scene.viewport
    assert scene.sync.attached
    assert scene.transaction.events == [("start", "Attach Terrain Tracking"), ("commit",)]
    stored = scene.viewport.attributes["terrain_geolocation"]["transformation"]
    assert np.allclose(mh.as_matrix(stored), scene.viewport.matrix)


def test_attach_reports_missing_objects():
    scene = build_scene(attach=False)
    scene.host.erase(scene.source)
    with pytest.raises(TerrainNotConfiguredError) as info:
        scene.sync.attach()
    assert info.value.missing == ("Terrain Data",)
    assert "'Terrain Data'" in str(info.value)
    assert not scene.sync.attached


def test_attach_uses_configured_names():
    config = SyncConfig(terrain_name="Visible", data_name="Hidden")
    scene = build_scene(config=config, attach=False)
    with pytest.raises(TerrainNotConfiguredError) as info:
        scene.sync.attach()
    assert info.value.missing == ("Visible", "Hidden")


def test_detach_stops_listening(scene):
    scene.sync.detach()
    assert not scene.sync.attached
    scene.host.set_transform(scene.viewport, mh.translation((1.0, 0.0, 0.0)))
    assert len(scene.scheduler.queue) == 0
    scene.sync.detach()


def test_reattach_takes_a_new_baseline(scene):
    scene.sync.detach()
    scene.host.set_transform(scene.viewport, mh.translation((7.0, 0.0, 0.0)))
    scene.sync.attach()
    assert scene.sync.sync_now().state is SyncState.NO_OP
    assert np.array_equal(scene.source.matrix, np.eye(4))


def test_attach_twice_keeps_a_single_observer(scene):
    scene.sync.attach()
    scene.host.set_transform(scene.viewport, mh.translation((1.0, 0.0, 0.0)))
    assert len(scene.scheduler.queue) == 1
    assert scene.sync.bridge.ignored == 0


def test_sync_now_runs_immediately(scene):
    scene.viewport.matrix = mh.rotation_z(0.5)
    result = scene.sync.sync_now()
    assert result.state is SyncState.RELOCATING
    assert len(scene.scheduler.queue) == 0
