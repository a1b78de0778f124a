# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Root conftest — shared fixtures and settings isolation."""

from datetime import datetime, timezone

import pytest
from loguru import logger

TEST_HOST_ID = "taktile@testhost"


@pytest.fixture
def host_id():
    """A fixed producer identity so flow tags are predictable."""
    return TEST_HOST_ID


@pytest.fixture
def fixed_now():
    """A fixed UTC instant with a sub-millisecond component."""
    return datetime(2024, 3, 9, 14, 5, 7, 123456, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Drop TAKTILE_* env vars and the cached settings around every test."""
    import os

    from taktile.config import get_settings

    for key in list(os.environ):
        if key.startswith("TAKTILE_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Remove loguru sinks a test installed (they may point at captured streams)."""
    yield
    logger.remove()
