"""Shared pytest fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_quantummesh_logger():
    """Drop handlers added by setup_logger so each test starts clean."""
    yield
    logger = logging.getLogger("quantummesh")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
