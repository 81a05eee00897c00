"""Transport interface - Port definition for the subscribing side of a message bus."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SubscriptionHandle(Protocol):
    """A live subscription returned by the transport."""

    async def unsubscribe(self) -> None:
        """Stop receiving messages on this subscription."""
        ...


class SubscriptionTransportPort(ABC):
    """Abstract interface for subscribe operations.

    Implementations decode payloads and invoke the callback; failures are
    raised as exceptions instead of being returned.
    """

    @abstractmethod
    async def subscribe(self, subject: str, callback: Callable[..., Any]) -> SubscriptionHandle:
        """Subscribe ``callback`` to ``subject`` as an individual subscriber."""
        ...

    @abstractmethod
    async def queue_subscribe(
        self, subject: str, queue: str, callback: Callable[..., Any]
    ) -> SubscriptionHandle:
        """Subscribe ``callback`` to ``subject`` as a member of queue group ``queue``."""
        ...
