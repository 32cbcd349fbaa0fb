import pytest

from kubehop.config.item import (
    ItemType,
    coerce_value,
    format_value,
    new_item,
    parse_bool,
)


def test_has_value() -> None:
    item = new_item("region", ItemType.STRING)
    assert not item.has_value()

    item.value = ""
    assert not item.has_value()

    item.value = "eu-west-1"
    assert item.has_value()

    flag = new_item("no-history", ItemType.BOOL, False)
    assert not flag.has_value()
    flag.value = False
    assert flag.has_value()

    count = new_item("max-history", ItemType.INT, 100)
    count.value = 0
    assert count.has_value()


def test_value_string() -> None:
    item = new_item("set-current", ItemType.BOOL, True)
    assert item.value_string() == ""

    item.value = True
    assert item.value_string() == "true"

    item.value = False
    assert item.value_string() == "false"

    assert format_value(ItemType.INT, 42) == "42"
    assert format_value(ItemType.STRING, None) == ""


def test_parse_bool() -> None:
    assert parse_bool("true") is True
    assert parse_bool(" FALSE ") is False

    with pytest.raises(ValueError):
        parse_bool("yes")


def test_coerce_value() -> None:
    assert coerce_value(ItemType.STRING, "abc") == "abc"
    assert coerce_value(ItemType.STRING, 12) == "12"
    assert coerce_value(ItemType.STRING, True) == "true"
    assert coerce_value(ItemType.STRING, False) == "false"

    assert coerce_value(ItemType.INT, "12") == 12
    assert coerce_value(ItemType.INT, 7) == 7

    assert coerce_value(ItemType.BOOL, "true") is True
    assert coerce_value(ItemType.BOOL, False) is False

    with pytest.raises(ValueError):
        coerce_value(ItemType.INT, "twelve")

    with pytest.raises(ValueError):
        coerce_value(ItemType.INT, True)

    with pytest.raises(ValueError):
        coerce_value(ItemType.BOOL, "maybe")


def test_type_is_frozen() -> None:
    item = new_item("region", ItemType.STRING)
    with pytest.raises(ValueError):
        item.type = ItemType.INT
