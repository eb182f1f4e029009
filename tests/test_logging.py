"""Tests for logging setup."""

import logging

import pytest

from pft._logging import PACKAGE_LOGGER, configure_logging


@pytest.fixture
def pft_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def test_handler_installed_once(pft_logger):
    configure_logging("INFO")
    configure_logging("DEBUG")

    assert len(pft_logger.handlers) == 1
    assert pft_logger.level == logging.DEBUG
    assert pft_logger.handlers[0].level == logging.DEBUG


def test_level_from_environment(pft_logger, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PFT_LOG_LEVEL", "warning")
    configure_logging()
    assert pft_logger.level == logging.WARNING


def test_unknown_level_falls_back_to_info(pft_logger):
    configure_logging("chatty")
    assert pft_logger.level == logging.INFO
