"""Subscriber facade subscribing methods of service objects as NATS callbacks.

Assuming a service like::

    class TimeService:
        def __init__(self, transport):
            self.transport = transport

        async def NowMessage(self, request: TimeRequest): ...

        async def AskMessageQueue(self, subject, reply, request: TimeRequest):
            await self.transport.publish(reply, {"now": time.time()})

then::

    cancel = asyncio.Event()
    subscriber = Subscriber(cancel, transport)
    await subscriber.subscribe(TimeService(transport))

subscribes ``NowMessage`` to ``timeservice.now`` and ``AskMessageQueue`` to
``timeservice.ask`` in queue group ``timeservice_ask``. Setting ``cancel``
unsubscribes both.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from ..domain.models import RegistrationReport
from ..domain.services import enumerate_messages
from .lifecycle import SubscriptionLifecycleManager

if TYPE_CHECKING:
    from ..ports.logger import LoggerPort
    from ..ports.transport import SubscriptionTransportPort


class Subscriber:
    """Registers message callbacks on a connected transport.

    The transport connection is owned by the caller; the subscriber only
    subscribes and, through the cancellation event, unsubscribes.
    """

    def __init__(
        self,
        cancel: asyncio.Event,
        transport: SubscriptionTransportPort,
        logger: LoggerPort | None = None,
    ) -> None:
        """Initialize the subscriber.

        Args:
            cancel: Event whose setting unsubscribes everything registered here
            transport: Connected transport to subscribe on
            logger: Optional logger for subscribe and unsubscribe failures
        """
        self._cancel = cancel
        self._transport = transport
        self._lifecycle = SubscriptionLifecycleManager(transport, logger)

    @property
    def lifecycle(self) -> SubscriptionLifecycleManager:
        """Lifecycle manager owning the watcher tasks."""
        return self._lifecycle

    async def subscribe(self, service: Any) -> RegistrationReport:
        """Subscribe every message member of ``service``.

        Members ending in ``Message`` are subscribed individually and members
        ending in ``MessageQueue`` join a queue group. Callback signatures must
        follow the shapes described in ``subly.infrastructure.callbacks``.
        """
        report = RegistrationReport()
        for descriptor in enumerate_messages(service):
            report.outcomes.append(await self._lifecycle.register(self._cancel, descriptor))
        return report

    async def subscribe_mapping(
        self,
        messages: Mapping[str, Callable[..., Any]],
        queue: str | None = None,
    ) -> RegistrationReport:
        """Subscribe the callbacks of ``messages`` to their subjects.

        If ``queue`` is given, every callback joins that queue group.
        """
        report = RegistrationReport()
        for subject, callback in messages.items():
            if queue:
                outcome = await self._lifecycle.register_queued(
                    self._cancel, queue, subject, callback
                )
            else:
                outcome = await self._lifecycle.register_individual(
                    self._cancel, subject, callback
                )
            report.outcomes.append(outcome)
        return report

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait for all unsubscribes triggered by cancellation to finish."""
        return await self._lifecycle.drain(timeout)


def new_subscriber(
    cancel: asyncio.Event,
    transport: SubscriptionTransportPort,
    logger: LoggerPort | None = None,
) -> Subscriber:
    """Create a new Subscriber."""
    return Subscriber(cancel, transport, logger)
