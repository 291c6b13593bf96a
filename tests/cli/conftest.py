import logging
from collections.abc import Generator

import pytest


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Generator[None]:
    """``configure_logging`` replaces root handlers; put the originals back."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
