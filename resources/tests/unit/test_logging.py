"""
Unit tests for featuredocs logging setup.
"""

import json
import logging

import pytest

from featuredocs.utils.logging import PACKAGE_LOGGER, configure_root_logging

pytestmark = pytest.mark.unit


@pytest.fixture
def restore_package_logger():
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    root = logging.getLogger()
    saved = (package_logger.handlers[:], package_logger.level, package_logger.propagate)
    saved_root = (root.handlers[:], root.level)
    yield package_logger
    for handler in root.handlers:
        if handler not in saved_root[0] and handler not in package_logger.handlers:
            handler.close()
    root.handlers[:] = saved_root[0]
    root.setLevel(saved_root[1])
    for handler in package_logger.handlers:
        if handler not in saved[0]:
            handler.close()
    package_logger.handlers[:] = saved[0]
    package_logger.setLevel(saved[1])
    package_logger.propagate = saved[2]


def test_structured_log_file(tmp_path, restore_package_logger):
    log_file = tmp_path / "logs" / "featuredocs.log"
    configure_root_logging(level="DEBUG", structured=True, log_file=log_file)

    logging.getLogger(f"{PACKAGE_LOGGER}.test").info("Catalog refreshed")
    for handler in restore_package_logger.handlers:
        handler.flush()

    record = json.loads(log_file.read_text().splitlines()[-1])
    assert record["message"] == "Catalog refreshed"
    assert record["levelname"] == "INFO"
    assert record["name"] == f"{PACKAGE_LOGGER}.test"


def test_plain_format(tmp_path, restore_package_logger):
    log_file = tmp_path / "featuredocs.log"
    configure_root_logging(level="INFO", log_file=log_file, fmt="%(levelname)s|%(message)s")

    logging.getLogger(f"{PACKAGE_LOGGER}.test").warning("Skipping unusable catalog")
    logging.getLogger(f"{PACKAGE_LOGGER}.test").debug("hidden")
    for handler in restore_package_logger.handlers:
        handler.flush()

    assert log_file.read_text().splitlines() == ["WARNING|Skipping unusable catalog"]
