"""Payload encoding utilities for JSON and MessagePack."""

import json
from typing import Any

import msgpack
from pydantic import BaseModel

from ..domain.exceptions import SerializationError


def _to_plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


def encode_to_msgpack(value: Any) -> bytes:
    """Encode a payload value to MessagePack bytes."""
    try:
        return bytes(msgpack.packb(_to_plain(value), use_bin_type=True, default=str))
    except Exception as e:
        raise SerializationError(f"Failed to serialize to msgpack: {e}") from e


def encode_to_json(value: Any) -> bytes:
    """Encode a payload value to JSON bytes."""
    try:
        if isinstance(value, BaseModel):
            return value.model_dump_json().encode()
        return json.dumps(value, default=str).encode()
    except Exception as e:
        raise SerializationError(f"Failed to serialize to JSON: {e}") from e


def encode_payload(value: Any, use_msgpack: bool = False) -> bytes:
    """Encode an outgoing payload.

    Raw ``bytes`` are sent unchanged and ``None`` becomes an empty payload.
    """
    if value is None:
        return b""
    if isinstance(value, bytes | bytearray):
        return bytes(value)
    if use_msgpack:
        return encode_to_msgpack(value)
    return encode_to_json(value)


def is_msgpack(data: bytes) -> bool:
    """Check if data looks like MessagePack format."""
    if not data:
        return False

    # 0x80-0x9f: fixmap/fixarray, 0xc0-0xdf: nil, bool, bin, ext, map16/map32...
    first_byte = data[0]
    return 0x80 <= first_byte <= 0x9F or 0xC0 <= first_byte <= 0xDF


def decode_payload(data: bytes, use_msgpack: bool = False) -> Any:
    """Decode an incoming payload, detecting its format.

    With ``use_msgpack`` every payload is unpacked as MessagePack first, so
    scalars and strings survive. Otherwise MessagePack is tried only when the
    leading byte suggests a container or nil/bool/bin value. JSON and then
    UTF-8 text are the fallbacks. Undecodable binary data is returned as
    ``bytes``.
    """
    if not data:
        return None

    if use_msgpack or is_msgpack(data):
        try:
            return msgpack.unpackb(data, raw=False)
        except (msgpack.UnpackException, ValueError):
            pass

    try:
        text = data.decode()
    except UnicodeDecodeError:
        return bytes(data)

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def decode_into(
    data: bytes, model_class: type[BaseModel], use_msgpack: bool = False
) -> BaseModel:
    """Decode a payload and validate it into a Pydantic model."""
    payload = decode_payload(data, use_msgpack)
    try:
        return model_class.model_validate(payload)
    except Exception as e:
        raise SerializationError(
            f"Failed to decode payload into {model_class.__name__}: {e}"
        ) from e
