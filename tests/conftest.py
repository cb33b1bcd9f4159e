import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_level():
    """The CLI --log_level flag changes the root level; undo it after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
