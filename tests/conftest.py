"""Shared fixtures."""

import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo any logging configuration done by a test (the CLI configures it)."""
    yield
    logging.root.handlers.clear()
    structlog.reset_defaults()
