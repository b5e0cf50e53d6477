"""Tests for CacheKeyBuilder: key format, validation and parsing."""

import pytest

from app.domain.enums import CacheEntity, CacheOperation
from app.infrastructure.cache.exceptions import InvalidCacheKeyError
from app.infrastructure.cache.keys import CacheKeyBuilder, ParsedCacheKey


@pytest.fixture
def keys() -> CacheKeyBuilder:
    return CacheKeyBuilder("v1")


def test_build_formats_match_documented_examples(keys: CacheKeyBuilder) -> None:
    assert keys.build("product", "all") == "v1:product:all"
    assert keys.build(CacheEntity.PRODUCT, CacheOperation.ID, 123) == "v1:product:id:123"
    assert keys.page_key(CacheEntity.PRODUCT, 1) == "v1:product:page:1"
    assert keys.customer_orders_key(456) == "v1:order:customer:456"
    assert keys.all_key(CacheEntity.CUSTOMER) == "v1:customer:all"
    assert keys.item_key(CacheEntity.ORDER, 0) == "v1:order:id:0"


@pytest.mark.parametrize(
    ("entity", "operation", "identifier"),
    [
        ("product", "all", None),
        ("product", "id", 42),
        ("customer", "page", 3),
        ("order", "customer", 7),
    ],
)
def test_parse_returns_exactly_the_built_fields(
    keys: CacheKeyBuilder, entity: str, operation: str, identifier: int | None
) -> None:
    parsed = CacheKeyBuilder.parse(keys.build(entity, operation, identifier))
    assert parsed == ParsedCacheKey("v1", entity, operation, identifier)


@pytest.mark.parametrize(
    ("entity", "operation", "identifier", "component"),
    [
        ("", "all", None, "entity"),
        ("pro:duct", "all", None, "entity"),
        ("product", "", None, "operation"),
        ("product", "a:ll", None, "operation"),
        ("product", "search", None, "operation"),
        ("product", "id", None, "identifier"),
        ("product", "page", None, "identifier"),
        ("order", "customer", None, "identifier"),
        ("product", "all", 1, "identifier"),
        ("product", "id", -1, "identifier"),
        ("product", "id", True, "identifier"),
        ("prodüct", "all", None, "entity"),
    ],
)
def test_build_rejects_malformed_components(
    keys: CacheKeyBuilder, entity: str, operation: str, identifier, component: str
) -> None:
    with pytest.raises(InvalidCacheKeyError) as exc_info:
        keys.build(entity, operation, identifier)
    assert exc_info.value.error_code == "INVALID_CACHE_KEY"
    assert exc_info.value.details == {"component": component}


def test_invalid_key_error_is_a_value_error(keys: CacheKeyBuilder) -> None:
    with pytest.raises(ValueError):
        keys.build("product", "id")


@pytest.mark.parametrize("version", ["", "v:1"])
def test_version_must_be_usable_as_key_component(version: str) -> None:
    with pytest.raises(InvalidCacheKeyError):
        CacheKeyBuilder(version)


@pytest.mark.parametrize(
    "key",
    ["", "v1", "v1:product", "v1:product:id:abc", "v1:product:id:1:2", "v1::all", "v1:product:id:-1"],
)
def test_parse_rejects_malformed_keys(key: str) -> None:
    assert CacheKeyBuilder.parse(key) is None


def test_entity_of() -> None:
    assert CacheKeyBuilder.entity_of("v1:order:customer:5") == "order"
    assert CacheKeyBuilder.entity_of("v1:order") is None
    assert CacheKeyBuilder.entity_of("garbage") is None


def test_is_list_key() -> None:
    assert CacheKeyBuilder.is_list_key("v1:product:all")
    assert CacheKeyBuilder.is_list_key("v1:product:page:2")
    assert not CacheKeyBuilder.is_list_key("v1:product:id:2")
    assert not CacheKeyBuilder.is_list_key("v1:order:customer:2")
    assert not CacheKeyBuilder.is_list_key("v1:product")


def test_parsed_key_is_list(keys: CacheKeyBuilder) -> None:
    assert CacheKeyBuilder.parse(keys.all_key("product")).is_list
    assert not CacheKeyBuilder.parse(keys.item_key("product", 1)).is_list


def test_pattern_for_is_prefix_of_every_entity_key(keys: CacheKeyBuilder) -> None:
    prefix = keys.pattern_for(CacheEntity.PRODUCT)
    assert prefix == "v1:product:"
    assert keys.is_key_for_entity(keys.item_key("product", 9), "product")
    assert not keys.is_key_for_entity(keys.item_key("order", 9), "product")
    assert not keys.is_key_for_entity("v2:product:id:9", "product")


def test_version_bump_changes_every_key() -> None:
    old, new = CacheKeyBuilder("v1"), CacheKeyBuilder("v2")
    assert old.item_key("product", 5) != new.item_key("product", 5)
    assert CacheKeyBuilder.parse(new.item_key("product", 5)).version == "v2"
