"""Domain services for discovering message members on service objects."""

import inspect
from typing import Any

from .models import SubscriptionDescriptor
from .naming import resolve_member, service_name_for


def _is_public(name: str) -> bool:
    return not name.startswith("_")


def _is_callable_member(kind: type, name: str) -> bool:
    """Check if ``name`` is a callable attribute of ``kind`` without evaluating it.

    Properties, other data descriptors and nested classes are never considered
    callable here.
    """
    try:
        attr = inspect.getattr_static(kind, name)
    except AttributeError:
        return False
    if isinstance(attr, staticmethod | classmethod):
        return True
    if isinstance(attr, property) or inspect.isclass(attr):
        return False
    return callable(attr)


def enumerate_messages(target: Any) -> list[SubscriptionDescriptor]:
    """Collect a descriptor for every message member of ``target``.

    Every public callable visible on the concrete type of ``target``,
    inherited ones included, is matched against the naming conventions.
    Callbacks are bound to ``target`` so they act on its state.

    Returns:
        Descriptors sorted by subject, queued ones after plain ones on ties
    """
    kind = type(target)
    service_name = service_name_for(target)

    descriptors = []
    for name in dir(kind):
        if not _is_public(name) or not _is_callable_member(kind, name):
            continue

        resolution = resolve_member(name)
        if not resolution.matches:
            continue

        descriptors.append(
            SubscriptionDescriptor(
                service_name=service_name,
                message_name=resolution.message_name,
                queued=resolution.queued,
                callback=getattr(target, name),
            )
        )

    descriptors.sort(key=lambda d: (d.subject, d.queued))
    return descriptors
