"""Pytest configuration and shared fixtures."""

import asyncio
import os
import time
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from subly.infrastructure.nats_adapter import NATSTransport
from tests.builders import make_handle


@pytest.fixture
def mock_transport():
    """Create a mock transport handing out a fresh handle per subscribe."""
    mock = MagicMock()
    mock.handles = []

    async def subscribe(subject, callback):
        handle = make_handle()
        mock.handles.append(handle)
        return handle

    async def queue_subscribe(subject, queue, callback):
        handle = make_handle()
        mock.handles.append(handle)
        return handle

    mock.subscribe = AsyncMock(side_effect=subscribe)
    mock.queue_subscribe = AsyncMock(side_effect=queue_subscribe)
    return mock


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    mock = MagicMock()
    mock.info = MagicMock()
    mock.warning = MagicMock()
    mock.error = MagicMock()
    mock.debug = MagicMock()
    mock.exception = MagicMock()
    return mock


@pytest.fixture
def cancel():
    """Cancellation event shared by registrations in a test."""
    return asyncio.Event()


@pytest.fixture(scope="session")
def nats_container():
    """Start NATS container for integration tests."""
    if os.getenv("SKIP_INTEGRATION_TESTS", "").lower() == "true":
        pytest.skip("Integration tests disabled")

    # Use existing NATS if available
    if os.getenv("NATS_URL"):
        yield os.getenv("NATS_URL")
        return

    from testcontainers.nats import NatsContainer

    container = NatsContainer("nats:2.10-alpine")
    container.start()

    # Wait for NATS to be ready
    time.sleep(2)

    nats_url = f"nats://{container.get_container_host_ip()}:{container.get_exposed_port(4222)}"
    yield nats_url

    container.stop()


@pytest_asyncio.fixture
async def nats_transport(nats_container, mock_logger):
    """Create a real NATS transport for integration tests."""
    transport = NATSTransport(logger=mock_logger)
    await transport.connect([nats_container])

    yield transport

    await transport.disconnect()
