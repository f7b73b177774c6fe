"""Shared fixtures for tickwise tests."""

import pytest

from tickwise.config import RuntimeConfig
from tickwise.runtime import Runtime


@pytest.fixture
def fast_config():
    return RuntimeConfig(poll_interval=0.005, sync_timeout=0.5)


@pytest.fixture
async def runtime(fast_config):
    async with Runtime(config=fast_config) as rt:
        yield rt
