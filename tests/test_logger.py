import logging

import pytest

from initwindow.core.logger import get_logger, setup_logging


@pytest.fixture
def app_logger():
    logger = logging.getLogger("initwindow")
    saved = list(logger.handlers)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved


def test_setup_logging_is_idempotent(tmp_path, app_logger):
    first = setup_logging(tmp_path / "logs")
    second = setup_logging(tmp_path / "logs")

    assert first is second is app_logger
    assert len(app_logger.handlers) == 2
    assert (tmp_path / "logs" / "initwindow.log").exists()


def test_component_loggers_write_to_the_app_log(tmp_path, app_logger):
    setup_logging(tmp_path)
    get_logger("Discovery").info("scan done")
    for handler in app_logger.handlers:
        handler.flush()

    text = (tmp_path / "initwindow.log").read_text(encoding="utf-8")
    assert "initwindow.Discovery | scan done" in text
