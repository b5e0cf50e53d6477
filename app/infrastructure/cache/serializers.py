"""Payload serializers for cached values.

The format choice affects only encode/decode, never cache logic. JSON is
easier to inspect in redis-cli; MessagePack is smaller and faster for
high-traffic deployments. Cached values are plain JSON-compatible data
(dicts, lists, str, int, float, bool, None); services convert DTOs to
and from that shape.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

import msgpack


class PayloadSerializer(Protocol):
    """Encode/decode cached values to bytes."""

    format_name: str

    def dumps(self, value: Any) -> bytes:
        ...

    def loads(self, payload: bytes) -> Any:
        ...


class JsonSerializer:
    """Compact UTF-8 JSON."""

    format_name = "json"

    def dumps(self, value: Any) -> bytes:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    def loads(self, payload: bytes) -> Any:
        return json.loads(payload)


class MsgPackSerializer:
    """MessagePack with str/bytes distinction preserved (use_bin_type)."""

    format_name = "msgpack"

    def dumps(self, value: Any) -> bytes:
        return msgpack.packb(value, use_bin_type=True)

    def loads(self, payload: bytes) -> Any:
        return msgpack.unpackb(payload, raw=False)


_SERIALIZERS: dict[str, type[JsonSerializer] | type[MsgPackSerializer]] = {
    JsonSerializer.format_name: JsonSerializer,
    MsgPackSerializer.format_name: MsgPackSerializer,
}


def get_serializer(format_name: str) -> PayloadSerializer:
    """Return the serializer for a configured format name (case-insensitive).

    Raises:
        ValueError: If the format is unknown.
    """
    try:
        return _SERIALIZERS[format_name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown cache serialization format {format_name!r}; "
            f"expected one of {sorted(_SERIALIZERS)}"
        ) from None
