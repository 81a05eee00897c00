"""subly - Subscribe methods of service objects as NATS callbacks by naming convention."""

from .application.subscriber import Subscriber, new_subscriber
from .infrastructure.nats_adapter import NATSTransport

__all__ = ["NATSTransport", "Subscriber", "new_subscriber"]
__version__ = "0.1.0"
