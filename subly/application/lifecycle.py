"""Subscription lifecycle: subscribe now, unsubscribe when cancellation fires."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..domain.models import RegistrationOutcome, SubscriptionDescriptor

if TYPE_CHECKING:
    from ..ports.logger import LoggerPort
    from ..ports.transport import SubscriptionHandle, SubscriptionTransportPort


def _default_logger() -> LoggerPort:
    from ..infrastructure.simple_logger import SimpleLogger

    return SimpleLogger()


def _context(subject: str, queue: str | None, **extra: Any) -> dict[str, Any]:
    context = {"subject": subject, **extra}
    if queue:
        context["queue"] = queue
    return context


class SubscriptionLifecycleManager:
    """Issues subscribe calls and tears subscriptions down on cancellation.

    Every successful subscription gets one watcher task parked on the
    cancellation event; once the event is set the watcher unsubscribes and
    exits. Failures on either side are logged and never raised.
    """

    def __init__(
        self,
        transport: SubscriptionTransportPort,
        logger: LoggerPort | None = None,
    ) -> None:
        self._transport = transport
        self._logger = logger or _default_logger()
        self._watchers: set[asyncio.Task[None]] = set()

    @property
    def active_watchers(self) -> int:
        """Number of watchers that have not finished yet."""
        return sum(1 for task in self._watchers if not task.done())

    async def register(
        self, cancel: asyncio.Event, descriptor: SubscriptionDescriptor
    ) -> RegistrationOutcome:
        """Register a descriptor as a queued or individual subscription."""
        if descriptor.queued:
            return await self.register_queued(
                cancel, descriptor.queue_name, descriptor.subject, descriptor.callback
            )
        return await self.register_individual(cancel, descriptor.subject, descriptor.callback)

    async def register_individual(
        self, cancel: asyncio.Event, subject: str, callback: Callable[..., Any]
    ) -> RegistrationOutcome:
        """Subscribe ``callback`` to ``subject`` until ``cancel`` is set."""
        try:
            handle = await self._transport.subscribe(subject, callback)
        except Exception as e:
            return self._subscribe_failed(subject, None, e)

        self._watch(cancel, handle, subject, None)
        return RegistrationOutcome(subject=subject, success=True)

    async def register_queued(
        self,
        cancel: asyncio.Event,
        queue_name: str,
        subject: str,
        callback: Callable[..., Any],
    ) -> RegistrationOutcome:
        """Subscribe ``callback`` to ``subject`` in ``queue_name`` until ``cancel`` is set."""
        try:
            handle = await self._transport.queue_subscribe(subject, queue_name, callback)
        except Exception as e:
            return self._subscribe_failed(subject, queue_name, e)

        self._watch(cancel, handle, subject, queue_name)
        return RegistrationOutcome(subject=subject, queue=queue_name, success=True)

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait for all watchers to finish unsubscribing.

        Only waits; the cancellation event must be set by its owner.

        Args:
            timeout: Grace period in seconds, or None to wait indefinitely

        Returns:
            True if every watcher finished within the grace period
        """
        pending = [task for task in self._watchers if not task.done()]
        if not pending:
            return True

        _, still_pending = await asyncio.wait(pending, timeout=timeout)
        return not still_pending

    def _subscribe_failed(
        self, subject: str, queue: str | None, error: Exception
    ) -> RegistrationOutcome:
        self._logger.error("Subscribe failed", **_context(subject, queue, error=str(error)))
        return RegistrationOutcome(subject=subject, queue=queue, success=False, error=str(error))

    def _watch(
        self,
        cancel: asyncio.Event,
        handle: SubscriptionHandle,
        subject: str,
        queue: str | None,
    ) -> None:
        task = asyncio.create_task(
            self._unsubscribe_on_cancel(cancel, handle, subject, queue),
            name=f"subly-watcher:{subject}",
        )
        self._watchers.add(task)
        task.add_done_callback(self._watchers.discard)

    async def _unsubscribe_on_cancel(
        self,
        cancel: asyncio.Event,
        handle: SubscriptionHandle,
        subject: str,
        queue: str | None,
    ) -> None:
        await cancel.wait()
        try:
            await handle.unsubscribe()
        except Exception as e:
            self._logger.error("Unsubscribe failed", **_context(subject, queue, error=str(e)))
            return

        self._logger.debug("Unsubscribed", **_context(subject, queue))
