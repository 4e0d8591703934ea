import pytest

from terrain_geolocation.utils.common import SyncConfig
from terrain_geolocation.utils.logging_system import TerrainSyncLogger, log_error, log_info, log_warn


def test_logger_buffers_and_summarises():
    logger = TerrainSyncLogger(echo=False)
    logger.info("[Sync] a")
    logger.warn("[Crop] b")
    logger.error("[Geo] c")
    logger.error("[Geo] d")
    assert logger.messages("ERROR") == ["[Geo] c", "[Geo] d"]
    assert logger.get_summary() == "Log: 1 INFO · 1 WARN · 2 ERROR"
    logger.clear()
    assert logger.messages() == []


def test_export_txt(tmp_path):
    logger = TerrainSyncLogger(echo=False)
    logger.info("[Sync] attached")
    out = logger.export_txt(tmp_path / "session.txt")
    text = out.read_text(encoding="utf-8")
    assert "TERRAIN GEO-LOCATION SESSION LOG" in text
    assert "Total entries: 1" in text
    assert "[INFO]" in text and "[Sync] attached" in text


def test_module_functions_use_global_logger(_quiet_logger):
    log_info("one")
    log_warn("two")
    log_error("three")
    assert _quiet_logger.messages() == ["one", "two", "three"]


def test_echo_prints_with_prefix(capsys):
    TerrainSyncLogger(echo=True).warn("[Observer] hi")
    assert capsys.readouterr().out.strip() == "[TGEO WARN] [Observer] hi"


def test_config_defaults():
    config = SyncConfig()
    assert config.terrain_name == "Terrain"
    assert config.data_name == "Terrain Data"
    assert config.length_tolerance == pytest.approx(1e-3)
    assert config.compensate_north_projection


@pytest.mark.parametrize(
    "kwargs",
    [
        {"terrain_name": ""},
        {"data_name": "Terrain"},
        {"length_tolerance": 0.0},
        {"singular_tolerance": -1.0},
    ],
)
def test_config_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        SyncConfig(**kwargs)


def test_config_overrides_are_validated():
    config = SyncConfig().with_overrides(terrain_name="Visible")
    assert config.terrain_name == "Visible"
    with pytest.raises(ValueError):
        config.with_overrides(data_name="Visible")
