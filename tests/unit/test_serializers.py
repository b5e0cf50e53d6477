"""Tests for cached payload serializers."""

from decimal import Decimal

import pytest

from app.infrastructure.cache.serializers import JsonSerializer, MsgPackSerializer, get_serializer

VALUE = {"id": 1, "name": "Café", "price": "9.99", "tags": ["a"], "description": None}


@pytest.mark.parametrize("serializer", [JsonSerializer(), MsgPackSerializer()])
def test_plain_data_survives_encoding(serializer) -> None:
    payload = serializer.dumps(VALUE)
    assert isinstance(payload, bytes)
    assert serializer.loads(payload) == VALUE


def test_json_is_compact_utf8() -> None:
    assert JsonSerializer().dumps({"a": "é"}) == '{"a":"é"}'.encode("utf-8")


def test_msgpack_is_smaller_than_json() -> None:
    rows = [dict(VALUE, id=i) for i in range(50)]
    assert len(MsgPackSerializer().dumps(rows)) < len(JsonSerializer().dumps(rows))


@pytest.mark.parametrize("serializer", [JsonSerializer(), MsgPackSerializer()])
def test_rejects_non_plain_values(serializer) -> None:
    with pytest.raises(TypeError):
        serializer.dumps({"price": Decimal("1.00")})


@pytest.mark.parametrize(("name", "expected"), [("json", "json"), ("MsgPack", "msgpack")])
def test_get_serializer_by_name(name: str, expected: str) -> None:
    assert get_serializer(name).format_name == expected


def test_get_serializer_unknown_format() -> None:
    with pytest.raises(ValueError, match="yaml"):
        get_serializer("yaml")
