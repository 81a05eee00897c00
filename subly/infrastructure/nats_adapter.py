"""NATS adapter - Concrete implementation of SubscriptionTransportPort."""

from collections.abc import Callable
from typing import Any

import nats
from nats.aio.client import Client as NATSClient
from nats.aio.msg import Msg
from nats.aio.subscription import Subscription

from ..domain.exceptions import NotConnectedError, SubscribeError, UnsubscribeError
from ..ports.logger import LoggerPort
from ..ports.transport import SubscriptionTransportPort
from .callbacks import make_message_handler
from .config import LogContext, NATSConnectionConfig
from .serialization import decode_payload, encode_payload
from .simple_logger import SimpleLogger


class NATSSubscriptionHandle:
    """Handle over a nats-py subscription."""

    def __init__(self, subscription: Subscription, subject: str, queue: str | None = None):
        self._subscription = subscription
        self.subject = subject
        self.queue = queue

    async def unsubscribe(self) -> None:
        """Unsubscribe from the subject.

        Raises:
            UnsubscribeError: If the client rejects the unsubscribe
        """
        try:
            await self._subscription.unsubscribe()
        except Exception as e:
            raise UnsubscribeError(
                f"Failed to unsubscribe from {self.subject}: {e}", subject=self.subject
            ) from e


class NATSTransport(SubscriptionTransportPort):
    """NATS implementation of the transport port with payload decoding."""

    def __init__(
        self,
        config: NATSConnectionConfig | None = None,
        logger: LoggerPort | None = None,
    ):
        """Initialize NATS transport with configuration.

        Args:
            config: Connection configuration. If not provided, uses defaults.
            logger: Optional logger. If not provided, uses SimpleLogger.
        """
        self._config = config or NATSConnectionConfig()
        self._logger = logger or SimpleLogger()
        self._nc: NATSClient | None = None

    @classmethod
    def from_client(
        cls,
        client: NATSClient,
        config: NATSConnectionConfig | None = None,
        logger: LoggerPort | None = None,
    ) -> "NATSTransport":
        """Wrap an already connected nats-py client."""
        transport = cls(config=config, logger=logger)
        transport._nc = client
        return transport

    async def connect(self, servers: list[str] | None = None) -> None:
        """Connect to NATS servers.

        Args:
            servers: Optional override for server URLs. If not provided, uses config.
        """
        conn_params = self._config.to_connection_params()
        if servers:
            conn_params["servers"] = servers

        self._nc = await nats.connect(**conn_params)

        log_ctx = LogContext(operation="connect", component="NATSTransport")
        self._logger.info(
            "Connected to NATS", servers=conn_params["servers"], **log_ctx.to_dict()
        )

    async def disconnect(self) -> None:
        """Disconnect from NATS, draining pending messages first."""
        if self._nc and self._nc.is_connected:
            await self._nc.drain()
        self._nc = None

    async def is_connected(self) -> bool:
        """Check if connected to NATS."""
        return self._nc is not None and self._nc.is_connected

    def _get_connection(self, operation: str) -> NATSClient:
        if self._nc is None or not self._nc.is_connected:
            raise NotConnectedError(operation)
        return self._nc

    async def subscribe(
        self, subject: str, callback: Callable[..., Any]
    ) -> NATSSubscriptionHandle:
        """Subscribe ``callback`` to ``subject``.

        Raises:
            NotConnectedError: If the transport has no open connection
            SubscribeError: If the callback shape is unsupported or the client
                rejects the subscription
        """
        return await self._subscribe(subject, None, callback)

    async def queue_subscribe(
        self, subject: str, queue: str, callback: Callable[..., Any]
    ) -> NATSSubscriptionHandle:
        """Subscribe ``callback`` to ``subject`` in queue group ``queue``.

        Raises:
            NotConnectedError: If the transport has no open connection
            SubscribeError: If the callback shape is unsupported or the client
                rejects the subscription
        """
        return await self._subscribe(subject, queue, callback)

    async def _subscribe(
        self, subject: str, queue: str | None, callback: Callable[..., Any]
    ) -> NATSSubscriptionHandle:
        nc = self._get_connection("subscribe")
        try:
            handler = make_message_handler(
                callback, self._logger, subject, queue, self._config.use_msgpack
            )
            subscription = await nc.subscribe(subject, queue=queue or "", cb=handler)
        except Exception as e:
            raise SubscribeError(
                f"Failed to subscribe to {subject}: {e}", subject=subject, queue=queue
            ) from e

        self._logger.debug(
            "Subscribed",
            **LogContext(subject=subject, queue=queue, operation="subscribe").to_dict(),
        )
        return NATSSubscriptionHandle(subscription, subject, queue)

    async def publish(self, subject: str, payload: Any = None, reply: str = "") -> None:
        """Publish an encoded payload to ``subject``."""
        nc = self._get_connection("publish")
        await nc.publish(subject, encode_payload(payload, self._config.use_msgpack), reply=reply)

    async def request(self, subject: str, payload: Any = None, timeout: float = 2.0) -> Any:
        """Send a request and return the decoded reply payload."""
        nc = self._get_connection("request")
        response: Msg = await nc.request(
            subject, encode_payload(payload, self._config.use_msgpack), timeout=timeout
        )
        return decode_payload(response.data, self._config.use_msgpack)

    async def flush(self, timeout: float = 2.0) -> None:
        """Flush pending protocol data to the server."""
        nc = self._get_connection("flush")
        await nc.flush(timeout=timeout)
