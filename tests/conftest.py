"""Shared fixtures."""

import pytest

from common.logging_utils import reset_logged_messages


@pytest.fixture(autouse=True)
def _fresh_logged_messages():
    """Every test starts with an empty once-only message registry."""
    reset_logged_messages()
    yield
    reset_logged_messages()
