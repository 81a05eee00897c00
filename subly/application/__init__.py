"""Application layer - Subscription lifecycle and the subscriber facade."""

from .lifecycle import SubscriptionLifecycleManager
from .subscriber import Subscriber, new_subscriber

__all__ = ["Subscriber", "SubscriptionLifecycleManager", "new_subscriber"]
