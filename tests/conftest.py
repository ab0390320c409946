import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("buildtree")
    for h in list(logger.handlers):
        logger.removeHandler(h)
