"""Domain layer - Naming conventions, models and member discovery."""

from .exceptions import (
    NotConnectedError,
    SerializationError,
    SubscribeError,
    SublyError,
    TransportError,
    UnsubscribeError,
)
from .models import RegistrationOutcome, RegistrationReport, SubscriptionDescriptor
from .naming import (
    MemberResolution,
    qualified_type_name,
    queue_name_for,
    resolve_member,
    resolve_type_label,
    service_name_for,
    subject_for,
)
from .services import enumerate_messages

__all__ = [
    "MemberResolution",
    "NotConnectedError",
    "RegistrationOutcome",
    "RegistrationReport",
    "SerializationError",
    "SubscribeError",
    "SublyError",
    "SubscriptionDescriptor",
    "TransportError",
    "UnsubscribeError",
    "enumerate_messages",
    "qualified_type_name",
    "queue_name_for",
    "resolve_member",
    "resolve_type_label",
    "service_name_for",
    "subject_for",
]
