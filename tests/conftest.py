"""Shared test fixtures."""
from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest

from helpers import FakeClock
from sdk_build_action.core.client import BuildClient
from sdk_build_action.core.config import ClientConfig
from sdk_build_action.gateway.mock import MockGateway

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_gateway() -> MockGateway:
    return MockGateway()


@pytest.fixture
async def connected_mock_gateway() -> AsyncGenerator[MockGateway, None]:
    gw = MockGateway()
    await gw.connect()
    yield gw
    await gw.close()


@pytest.fixture
def client(connected_mock_gateway: MockGateway) -> BuildClient:
    return BuildClient(config=ClientConfig(api_key="sk-test"), gateway=connected_mock_gateway)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
