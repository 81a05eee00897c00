"""Unit tests for NATSTransport."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import msgpack
import pytest

from subly.domain.exceptions import NotConnectedError, SubscribeError, UnsubscribeError
from subly.infrastructure.config import NATSConnectionConfig
from subly.infrastructure.nats_adapter import NATSSubscriptionHandle, NATSTransport
from subly.ports.transport import SubscriptionHandle, SubscriptionTransportPort


@pytest.fixture
def mock_nats_client():
    """Create a connected mock nats-py client."""
    client = MagicMock()
    client.is_connected = True
    client.subscribe = AsyncMock(return_value=MagicMock(unsubscribe=AsyncMock()))
    client.publish = AsyncMock()
    client.request = AsyncMock()
    client.flush = AsyncMock()
    client.drain = AsyncMock()
    return client


@pytest.fixture
def transport(mock_nats_client, mock_logger):
    """Create a transport over the mock client."""
    return NATSTransport.from_client(mock_nats_client, logger=mock_logger)


class TestNATSTransportInit:
    """Test NATSTransport initialization."""

    def test_init_with_defaults(self):
        """Test initialization with default parameters."""
        transport = NATSTransport()

        assert isinstance(transport, SubscriptionTransportPort)
        assert isinstance(transport._config, NATSConnectionConfig)
        assert transport._nc is None

    @pytest.mark.asyncio
    async def test_not_connected_by_default(self):
        """Test that a fresh transport reports no connection."""
        assert await NATSTransport().is_connected() is False


class TestNATSTransportConnection:
    """Test NATSTransport connection management."""

    @pytest.fixture
    def mock_nats_module(self):
        """Mock the nats module."""
        with patch("subly.infrastructure.nats_adapter.nats") as mock:
            yield mock

    @pytest.mark.asyncio
    async def test_connect_uses_config(self, mock_nats_module, mock_nats_client, mock_logger):
        """Test connection with configured servers."""
        mock_nats_module.connect = AsyncMock(return_value=mock_nats_client)
        config = NATSConnectionConfig(servers=["nats://cfg:4222"], name="svc")
        transport = NATSTransport(config=config, logger=mock_logger)

        await transport.connect()

        mock_nats_module.connect.assert_awaited_once_with(
            servers=["nats://cfg:4222"],
            max_reconnect_attempts=10,
            reconnect_time_wait=2.0,
            name="svc",
        )
        assert await transport.is_connected() is True
        mock_logger.info.assert_called_once()

    @pytest.mark.asyncio
    async def test_connect_with_servers_override(self, mock_nats_module, mock_nats_client):
        """Test connection with servers override."""
        mock_nats_module.connect = AsyncMock(return_value=mock_nats_client)
        transport = NATSTransport(logger=MagicMock())

        await transport.connect(["nats://override:4222"])

        assert mock_nats_module.connect.call_args.kwargs["servers"] == ["nats://override:4222"]

    @pytest.mark.asyncio
    async def test_disconnect_drains(self, transport, mock_nats_client):
        """Test that disconnect drains the client."""
        await transport.disconnect()

        mock_nats_client.drain.assert_awaited_once()
        assert await transport.is_connected() is False

    @pytest.mark.asyncio
    async def test_disconnect_when_closed(self, transport, mock_nats_client):
        """Test that disconnecting a closed client does not drain."""
        mock_nats_client.is_connected = False

        await transport.disconnect()

        mock_nats_client.drain.assert_not_called()


class TestNATSTransportSubscribe:
    """Test subscribe operations."""

    @pytest.mark.asyncio
    async def test_subscribe(self, transport, mock_nats_client):
        """Test individual subscription."""
        handle = await transport.subscribe("svc.msg", lambda p: None)

        assert isinstance(handle, NATSSubscriptionHandle)
        assert isinstance(handle, SubscriptionHandle)
        assert handle.subject == "svc.msg"
        assert handle.queue is None
        args, kwargs = mock_nats_client.subscribe.call_args
        assert args == ("svc.msg",)
        assert kwargs["queue"] == ""
        assert callable(kwargs["cb"])

    @pytest.mark.asyncio
    async def test_queue_subscribe(self, transport, mock_nats_client):
        """Test queue group subscription."""
        handle = await transport.queue_subscribe("svc.msg", "svc_msg", lambda p: None)

        assert handle.queue == "svc_msg"
        assert mock_nats_client.subscribe.call_args.kwargs["queue"] == "svc_msg"

    @pytest.mark.asyncio
    async def test_handler_dispatches_to_callback(self, transport, mock_nats_client):
        """Test the registered handler decodes and calls the callback."""
        received = []
        await transport.subscribe("svc.msg", lambda subject, p: received.append((subject, p)))
        handler = mock_nats_client.subscribe.call_args.kwargs["cb"]

        msg = MagicMock(subject="svc.msg", reply="", data=json.dumps({"a": 1}).encode())
        await handler(msg)

        assert received == [("svc.msg", {"a": 1})]

    @pytest.mark.asyncio
    async def test_client_error_wrapped(self, transport, mock_nats_client):
        """Test that client failures become SubscribeError."""
        mock_nats_client.subscribe.side_effect = RuntimeError("nats: invalid subject")

        with pytest.raises(SubscribeError) as exc_info:
            await transport.queue_subscribe("bad subject", "q", lambda p: None)

        assert exc_info.value.subject == "bad subject"
        assert exc_info.value.queue == "q"
        assert exc_info.value.details == {"subject": "bad subject", "queue": "q"}

    @pytest.mark.asyncio
    async def test_unsupported_callback_wrapped(self, transport, mock_nats_client):
        """Test that unsupported callback shapes become SubscribeError."""
        with pytest.raises(SubscribeError, match="positional arguments"):
            await transport.subscribe("svc.msg", lambda: None)

        mock_nats_client.subscribe.assert_not_called()

    @pytest.mark.asyncio
    async def test_subscribe_requires_connection(self, mock_logger):
        """Test subscribing without a connection."""
        with pytest.raises(NotConnectedError):
            await NATSTransport(logger=mock_logger).subscribe("svc.msg", lambda p: None)

    @pytest.mark.asyncio
    async def test_queue_subscribe_requires_connection(self, transport, mock_nats_client):
        """Test that a closed connection is reported as NotConnectedError."""
        mock_nats_client.is_connected = False

        with pytest.raises(NotConnectedError):
            await transport.queue_subscribe("svc.msg", "svc_msg", lambda p: None)

        mock_nats_client.subscribe.assert_not_called()

    @pytest.mark.asyncio
    async def test_handler_decodes_configured_msgpack(self, mock_nats_client, mock_logger):
        """Test that scalar MessagePack payloads reach the callback intact."""
        transport = NATSTransport.from_client(
            mock_nats_client, config=NATSConnectionConfig(use_msgpack=True), logger=mock_logger
        )
        received = []
        await transport.subscribe("svc.msg", received.append)
        handler = mock_nats_client.subscribe.call_args.kwargs["cb"]

        for value in (42, "hi"):
            await handler(MagicMock(subject="svc.msg", reply="", data=msgpack.packb(value)))

        assert received == [42, "hi"]


class TestNATSSubscriptionHandle:
    """Test subscription handles."""

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        """Test successful unsubscribe."""
        subscription = MagicMock(unsubscribe=AsyncMock())
        handle = NATSSubscriptionHandle(subscription, "svc.msg")

        await handle.unsubscribe()

        subscription.unsubscribe.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unsubscribe_error_wrapped(self):
        """Test that client failures become UnsubscribeError."""
        subscription = MagicMock(unsubscribe=AsyncMock(side_effect=RuntimeError("closed")))
        handle = NATSSubscriptionHandle(subscription, "svc.msg")

        with pytest.raises(UnsubscribeError) as exc_info:
            await handle.unsubscribe()

        assert exc_info.value.subject == "svc.msg"


class TestNATSTransportPublish:
    """Test publish and request helpers."""

    @pytest.mark.asyncio
    async def test_publish_json(self, transport, mock_nats_client):
        """Test publishing encodes with JSON by default."""
        await transport.publish("svc.msg", {"a": 1}, reply="_INBOX.x")

        mock_nats_client.publish.assert_awaited_once_with(
            "svc.msg", b'{"a": 1}', reply="_INBOX.x"
        )

    @pytest.mark.asyncio
    async def test_request_decodes_reply(self, transport, mock_nats_client):
        """Test request returns the decoded reply payload."""
        mock_nats_client.request.return_value = MagicMock(data=b'{"ok": true}')

        assert await transport.request("svc.ask", {"q": 1}, timeout=1.0) == {"ok": True}
        mock_nats_client.request.assert_awaited_once_with("svc.ask", b'{"q": 1}', timeout=1.0)

    @pytest.mark.asyncio
    async def test_request_decodes_configured_msgpack(self, mock_nats_client, mock_logger):
        """Test request decodes MessagePack replies when configured."""
        transport = NATSTransport.from_client(
            mock_nats_client, config=NATSConnectionConfig(use_msgpack=True), logger=mock_logger
        )
        mock_nats_client.request.return_value = MagicMock(data=msgpack.packb(-1))

        assert await transport.request("svc.ask", 1) == -1
        mock_nats_client.request.assert_awaited_once_with("svc.ask", msgpack.packb(1), timeout=2.0)

    @pytest.mark.asyncio
    async def test_publish_requires_connection(self, transport, mock_nats_client):
        """Test publishing on a closed connection."""
        mock_nats_client.is_connected = False

        with pytest.raises(NotConnectedError):
            await transport.publish("svc.msg", {})

    @pytest.mark.asyncio
    async def test_flush(self, transport, mock_nats_client):
        """Test flushing the connection."""
        await transport.flush(timeout=0.5)

        mock_nats_client.flush.assert_awaited_once_with(timeout=0.5)
