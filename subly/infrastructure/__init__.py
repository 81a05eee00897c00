"""Infrastructure layer - Concrete implementations of ports."""

from .callbacks import CallbackShape, inspect_callback, make_message_handler
from .config import LogContext, NATSConnectionConfig
from .nats_adapter import NATSSubscriptionHandle, NATSTransport
from .simple_logger import SimpleLogger

__all__ = [
    "CallbackShape",
    "LogContext",
    "NATSConnectionConfig",
    "NATSSubscriptionHandle",
    "NATSTransport",
    "SimpleLogger",
    "inspect_callback",
    "make_message_handler",
]
