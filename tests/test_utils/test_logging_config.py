"""
Tests for logging configuration.
"""

import logging

import pytest

from kmeans_study.utils.logging_config import PACKAGE_LOGGER, get_logger, setup_logging


@pytest.fixture
def restore_package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


def test_get_logger_nests_under_package():
    assert get_logger("kmeans_study.algorithms.clustering").name == "kmeans_study.algorithms.clustering"
    assert get_logger("__main__").name == "kmeans_study.__main__"
    assert get_logger(PACKAGE_LOGGER).name == PACKAGE_LOGGER


def test_setup_logging_level_and_file(tmp_path, restore_package_logger):
    log_file = tmp_path / "logs" / "run.log"
    logger = setup_logging("debug", log_file=log_file)

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    get_logger("kmeans_study.test").debug("hello file")
    for handler in logger.handlers:
        handler.flush()
    assert "hello file" in log_file.read_text(encoding="utf-8")


def test_setup_logging_is_idempotent(restore_package_logger):
    setup_logging("INFO")
    logger = setup_logging("WARNING")
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_setup_logging_rejects_unknown_level(restore_package_logger):
    with pytest.raises(ValueError, match="Unknown log level"):
        setup_logging("LOUD")
