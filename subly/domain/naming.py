"""Naming conventions that turn type and member names into NATS subjects.

A member whose name ends in ``Message`` is subscribed as a plain subscriber
and a member ending in ``MessageQueue`` joins a queue group. Given::

    class SomeService:
        def SubActionMessage(self, person): ...
        def RepActionMessageQueue(self, subject, reply, person): ...

``SubActionMessage`` is subscribed to ``someservice.subaction`` and
``RepActionMessageQueue`` to ``someservice.repaction`` in the queue group
``someservice_repaction``.
"""

from typing import Any, NamedTuple

MESSAGE_SUFFIX = "Message"
QUEUE_SUFFIX = "Queue"
MESSAGE_QUEUE_SUFFIX = MESSAGE_SUFFIX + QUEUE_SUFFIX

_DECORATION_CHARS = ("(", ")", "*")


class MemberResolution(NamedTuple):
    """Outcome of matching a member name against the message conventions."""

    message_name: str
    queued: bool
    matches: bool


def resolve_type_label(qualified_type_name: str, take_segments: int, drop_segments: int) -> str:
    """Reduce a fully qualified type identifier to a label.

    The namespace prefix (up to the last ``/``) and pointer decorations are
    removed, then the last ``take_segments`` dotted parts are kept, of which
    the last ``drop_segments`` are dropped.

    Args:
        qualified_type_name: Type identifier such as ``"pkg/sub.(*SomeService)"``
        take_segments: Number of trailing dotted segments to keep
        drop_segments: Number of trailing segments to drop after taking

    Returns:
        The reduced label, possibly empty
    """
    name = qualified_type_name
    ix = name.rfind("/")
    if 0 < ix and ix + 1 < len(name):
        name = name[ix + 1 :]

    for char in _DECORATION_CHARS:
        name = name.replace(char, "")

    parts = name.split(".")
    take_segments = max(take_segments, 0)
    if take_segments < len(parts):
        parts = parts[len(parts) - take_segments :]
    if 0 < drop_segments < len(parts):
        parts = parts[: len(parts) - drop_segments]

    return ".".join(parts)


def resolve_member(member_name: str) -> MemberResolution:
    """Derive the message name and subscription kind from a member name.

    A member literally named ``Message`` or ``MessageQueue`` resolves to an
    empty message name; it is still a match.
    """
    is_queue = member_name.endswith(MESSAGE_QUEUE_SUFFIX)
    is_message = member_name.endswith(MESSAGE_SUFFIX)
    if not is_queue and not is_message:
        return MemberResolution(message_name="", queued=False, matches=False)

    message_name = member_name
    if is_queue:
        message_name = message_name.removesuffix(QUEUE_SUFFIX)
    message_name = message_name.removesuffix(MESSAGE_SUFFIX)

    return MemberResolution(message_name=message_name.lower(), queued=is_queue, matches=True)


def qualified_type_name(target: Any) -> str:
    """Fully qualified name of the concrete type of ``target``."""
    kind = type(target)
    return f"{kind.__module__}.{kind.__qualname__}"


def service_name_for(target: Any) -> str:
    """Lower-cased bare type name used as the subject prefix for ``target``."""
    return resolve_type_label(qualified_type_name(target), 1, 0).lower()


def subject_for(service_name: str, message_name: str) -> str:
    """Subject a message member subscribes to."""
    return f"{service_name}.{message_name}"


def queue_name_for(service_name: str, message_name: str) -> str:
    """Queue group a queued message member joins."""
    return f"{service_name}_{message_name}"
