"""Tests for value type inference."""

import math

import pytest

from storelens.core.types import (
    MISSING,
    DataType,
    infer_type,
    is_date_string,
    stringify_value,
    value_key,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, DataType.NULL),
        (MISSING, DataType.UNDEFINED),
        (True, DataType.BOOLEAN),
        (0, DataType.NUMBER),
        (3.5, DataType.NUMBER),
        ("hello", DataType.STRING),
        ("2024-01-15", DataType.DATE),
        ([1, 2], DataType.ARRAY),
        ({"a": 1}, DataType.OBJECT),
        (object(), DataType.STRING),
    ],
)
def test_infer_type(value, expected):
    assert infer_type(value) == expected


def test_infer_type_is_total():
    """Every value maps to exactly one known type."""
    values = [None, MISSING, False, 1, -2.5, math.inf, "", "x", [], {}, (1,), b"raw"]
    for value in values:
        assert infer_type(value) in set(DataType)


def test_bool_is_not_number():
    assert infer_type(False) == DataType.BOOLEAN
    assert infer_type(1) == DataType.NUMBER


@pytest.mark.parametrize(
    "value",
    ["2024-02-29", "2024-01-15T10:30:00Z", "2024-01-15T10:30:00.123+02:00", "12/31/2024", "1-5-2024"],
)
def test_valid_dates(value):
    assert is_date_string(value)


@pytest.mark.parametrize(
    "value",
    ["2024-02-30", "2023-02-29", "13/01/2024", "2024/01/15", "yesterday", "", 20240115],
)
def test_invalid_dates(value):
    assert not is_date_string(value)


def test_stringify_value():
    assert stringify_value(1) == "1"
    assert stringify_value(1.0) == "1"
    assert stringify_value("1") == "1"
    assert stringify_value(True) == "true"
    assert stringify_value(2.5) == "2.5"
    assert stringify_value({"b": 1, "a": 2}) == '{"a":2,"b":1}'


def test_value_key_keeps_string_and_number_apart():
    assert value_key(1) == value_key(1.0)
    assert value_key(1) != value_key("1")
    assert value_key(True) != value_key(1)
