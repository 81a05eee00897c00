"""Adapting user callbacks of various shapes to NATS message handlers.

Callbacks follow the NATS encoded-connection conventions::

    handler(msg: Msg)
    handler(person: Person)
    handler(subject, person)
    handler(subject, reply, person)

The payload parameter is decoded from the message data. When it is
annotated with a Pydantic model the payload is validated into that model;
``bytes`` and ``str`` annotations receive the raw data and its text.

Sync callbacks run inline on the event loop, and nats-py delivers each
subscription's messages one at a time, so a slow sync callback delays every
subscription on the connection. Long-running work belongs in an async
callback that awaits it, for example through ``asyncio.to_thread``.
"""

import inspect
import typing
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from nats.aio.msg import Msg
from pydantic import BaseModel

from ..ports.logger import LoggerPort
from .config import LogContext
from .serialization import decode_into, decode_payload

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class CallbackShape(str, Enum):
    """Argument layouts accepted for message callbacks."""

    RAW = "raw"
    PAYLOAD = "payload"
    SUBJECT_PAYLOAD = "subject_payload"
    SUBJECT_REPLY_PAYLOAD = "subject_reply_payload"


_SHAPES_BY_ARITY = {
    1: CallbackShape.PAYLOAD,
    2: CallbackShape.SUBJECT_PAYLOAD,
    3: CallbackShape.SUBJECT_REPLY_PAYLOAD,
}


class CallbackSpec:
    """How to call a callback for an incoming message."""

    def __init__(
        self,
        callback: Callable[..., Any],
        shape: CallbackShape,
        payload_type: Any,
        use_msgpack: bool = False,
    ):
        self.callback = callback
        self.shape = shape
        self.payload_type = payload_type
        self.use_msgpack = use_msgpack

    def arguments(self, msg: Msg) -> tuple[Any, ...]:
        """Build the positional arguments for ``msg``."""
        if self.shape is CallbackShape.RAW:
            return (msg,)

        payload = self.decode(msg.data)
        if self.shape is CallbackShape.PAYLOAD:
            return (payload,)
        if self.shape is CallbackShape.SUBJECT_PAYLOAD:
            return (msg.subject, payload)
        return (msg.subject, msg.reply, payload)

    def decode(self, data: bytes) -> Any:
        """Decode message data into the payload type the callback expects."""
        payload_type = self.payload_type
        if payload_type is bytes:
            return data
        if payload_type is str:
            return data.decode()
        if inspect.isclass(payload_type) and issubclass(payload_type, BaseModel):
            return decode_into(data, payload_type, self.use_msgpack)
        return decode_payload(data, self.use_msgpack)


def _type_hints(callback: Callable[..., Any]) -> dict[str, Any]:
    target = callback.__call__ if not inspect.isroutine(callback) else callback
    try:
        return typing.get_type_hints(target)
    except Exception:
        # Unresolvable forward references fall back to the raw annotations
        return dict(getattr(target, "__annotations__", {}))


def _is_msg_annotation(annotation: Any) -> bool:
    if annotation is Msg:
        return True
    return isinstance(annotation, str) and annotation.rsplit(".", 1)[-1] == "Msg"


def inspect_callback(callback: Callable[..., Any], use_msgpack: bool = False) -> CallbackSpec:
    """Work out the shape of ``callback``.

    Payloads are unpacked as MessagePack first when ``use_msgpack`` is set.

    Raises:
        TypeError: If the callback is not callable or takes an unsupported
            number of positional arguments
    """
    if not callable(callback):
        raise TypeError(f"Callback must be callable, got {type(callback).__name__}")

    signature = inspect.signature(callback)
    params = [p for p in signature.parameters.values() if p.kind in _POSITIONAL_KINDS]
    shape = _SHAPES_BY_ARITY.get(len(params))
    if shape is None:
        raise TypeError(
            f"Callback {getattr(callback, '__qualname__', callback)!r} must accept "
            f"1 to 3 positional arguments, got {len(params)}"
        )

    hints = _type_hints(callback)
    last = params[-1]
    payload_type = hints.get(last.name, last.annotation)
    if payload_type is inspect.Parameter.empty:
        payload_type = None

    if shape is CallbackShape.PAYLOAD and _is_msg_annotation(payload_type):
        shape = CallbackShape.RAW

    return CallbackSpec(callback, shape, payload_type, use_msgpack)


def make_message_handler(
    callback: Callable[..., Any],
    logger: LoggerPort,
    subject: str,
    queue: str | None = None,
    use_msgpack: bool = False,
) -> Callable[[Msg], Awaitable[None]]:
    """Wrap ``callback`` into a coroutine handler for nats-py subscriptions.

    Errors raised while decoding or inside the callback are logged; the
    subscription keeps receiving messages.
    """
    spec = inspect_callback(callback, use_msgpack)
    log_ctx = LogContext(subject=subject, queue=queue, component="NATSTransport")

    async def handler(msg: Msg) -> None:
        try:
            result = spec.callback(*spec.arguments(msg))
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.exception(
                "Message callback failed",
                exc_info=e,
                **log_ctx.with_operation("deliver").with_error(e).to_dict(),
            )

    return handler
