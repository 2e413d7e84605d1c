"""Shared fixtures for retrycase tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from retrycase.foundation.config import clear_settings_cache


@pytest.fixture(autouse=True)
def clean_settings() -> Iterator[None]:
    """Reload settings from the environment for every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def clean_logger() -> Iterator[None]:
    """Drop handlers installed by configure_logging()."""
    logger = logging.getLogger("retrycase")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)
