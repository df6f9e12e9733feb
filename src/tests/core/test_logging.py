"""
Logging Tests
=============

setup_logging configures the crf_math namespace; library modules log
through it.

Run: python -m pytest tests/core/test_logging.py -v
"""

import logging

import pytest

from crf_math import setup_logging
from crf_math.builders import build_cube
from crf_math.catalog import lookup
from crf_math.operations import augment


@pytest.fixture
def package_logger():
    logger = logging.getLogger("crf_math")
    saved = (logger.level, list(logger.handlers))
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]


def test_setup_logging_handlers(package_logger, tmp_path):
    """L1: One console handler, plus a file handler when a path is given."""
    logger = setup_logging(logging.DEBUG)
    assert logger is package_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1

    log_file = tmp_path / "crf.log"
    setup_logging(logging.INFO, str(log_file))
    assert len(logger.handlers) == 2
    assert log_file.exists()


def test_setup_logging_is_repeatable(package_logger):
    """L2: Calling twice does not stack handlers."""
    setup_logging()
    setup_logging()
    assert len(package_logger.handlers) == 1


def test_operations_log_to_file(package_logger, tmp_path):
    """L3: Applying an operation writes to the configured file."""
    log_file = tmp_path / "ops.log"
    setup_logging(logging.DEBUG, str(log_file))

    cube = build_cube()
    augment.apply(lookup("cube"), cube, {"face": cube.faces[0]})

    for handler in package_logger.handlers:
        handler.flush()
    assert "crf_math" in log_file.read_text(encoding="utf-8")
