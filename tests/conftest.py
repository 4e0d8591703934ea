import pytest

from terrain_geolocation.utils.logging_system import get_logger

from fakes import build_scene


@pytest.fixture(autouse=True)
def _quiet_logger():
    logger = get_logger()
    echo = logger.echo
    logger.echo = False
    logger.clear()
    yield logger
    logger.echo = echo
    logger.clear()


@pytest.fixture
def scene():
    return build_scene()
