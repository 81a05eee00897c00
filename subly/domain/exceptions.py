"""Domain-specific exceptions for subscription handling."""


class SublyError(Exception):
    """Base exception for all subly errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportError(SublyError):
    """Message bus transport errors."""

    pass


class NotConnectedError(TransportError):
    """Raised when a transport operation is attempted without a connection."""

    def __init__(self, operation: str):
        super().__init__(
            f"Transport not connected. Cannot perform '{operation}' operation.",
            details={"operation": operation},
        )
        self.operation = operation


class SubscribeError(TransportError):
    """Raised when the transport rejects a subscribe or queue subscribe call."""

    def __init__(self, message: str, subject: str, queue: str | None = None):
        super().__init__(message)
        self.subject = subject
        self.queue = queue
        self.details["subject"] = subject
        if queue:
            self.details["queue"] = queue


class UnsubscribeError(TransportError):
    """Raised when the transport rejects tearing down a subscription."""

    def __init__(self, message: str, subject: str | None = None):
        super().__init__(message)
        self.subject = subject
        if subject:
            self.details["subject"] = subject


class SerializationError(TransportError):
    """Serialization/deserialization errors."""

    pass
