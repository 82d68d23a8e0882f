import logging

import pytest

from inventory_insights import settings
from inventory_insights.logger import resolve_level, setup_logger


@pytest.fixture
def fresh_logger():
    name = "inventory_insights.scripts_under_test"
    urllib3_level = logging.getLogger("urllib3").level
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logging.getLogger("urllib3").setLevel(urllib3_level)


@pytest.mark.parametrize(
    "level, expected",
    [(logging.DEBUG, logging.DEBUG), ("warning", logging.WARNING), ("nonsense", logging.INFO)],
)
def test_resolve_level(level, expected):
    assert resolve_level(level) == expected


def test_resolve_level_defaults_to_settings(monkeypatch):
    monkeypatch.setattr(settings, "LOG_LEVEL", "ERROR")

    assert resolve_level(None) == logging.ERROR


def test_setup_logger_writes_to_rotating_file(fresh_logger, tmp_path):
    logger = setup_logger(fresh_logger, log_level="debug", log_dir=tmp_path / "logs")
    logger.debug("Consumption rate skipped")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    for handler in logger.handlers:
        handler.flush()
    log_text = (tmp_path / "logs" / settings.LOG_FILENAME).read_text()
    assert "DEBUG - Consumption rate skipped" in log_text
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_setup_logger_is_idempotent(fresh_logger, tmp_path):
    first = setup_logger(fresh_logger, log_dir=tmp_path)
    second = setup_logger(fresh_logger, log_dir=tmp_path)

    assert first is second
    assert len(second.handlers) == 2
