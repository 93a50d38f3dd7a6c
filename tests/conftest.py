import logging
import pathlib
import sys

import pytest

p = str(pathlib.Path(__file__).resolve().parents[1])
sys.path.insert(0, p) if p not in sys.path else None

from taxcalc.config import get_settings  # noqa: E402


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def detach_log_handlers():
    yield
    logger = logging.getLogger("taxcalc")
    for handler in list(logger.handlers):
        if getattr(handler, "_taxcalc_owned", False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
