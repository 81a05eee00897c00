"""Ports layer - Interfaces for external communication."""

from .logger import LoggerPort
from .transport import SubscriptionHandle, SubscriptionTransportPort

__all__ = [
    "LoggerPort",
    "SubscriptionHandle",
    "SubscriptionTransportPort",
]
