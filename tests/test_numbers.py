from decimal import Decimal

import pytest

from keyset_python import format_decimal_or_string
from keyset_python import numbers_to_strings
from keyset_python import ValueObject


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, "0"),
        (-12, "-12"),
        (9007199254740993, "9007199254740993"),
        (2**256 - 1, str(2**256 - 1)),
        (Decimal("10.00"), "10"),
        (Decimal("-0.00"), "0"),
        (Decimal("1.50"), "1.5"),
        (Decimal("1E+3"), "1000"),
        (Decimal("0.000001"), "0.000001"),
        (
            Decimal("123456789012345678901234567890.123456789"),
            "123456789012345678901234567890.123456789",
        ),
        (0.1, "0.1"),
        (2.0, "2"),
        (1e20, "100000000000000000000"),
    ],
)
def test_numbers(value, expected):
    assert numbers_to_strings(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        ("10", "10"),
        ("10.00", "10"),
        ("1.50", "1.5"),
        ("-0", "0"),
        ("9007199254740993", "9007199254740993"),
        ("0x1F", "0x1F"),
        ("abc", "abc"),
        ("1e3", "1e3"),
        ("007", "007"),
        (" 1", " 1"),
        ("1\n", "1\n"),
        ("", ""),
        ("1.", "1."),
        (".5", ".5"),
    ],
)
def test_strings(value, expected):
    assert format_decimal_or_string(value) == expected
    assert numbers_to_strings(value) == expected


@pytest.mark.parametrize("value", [None, True, False, b"10", float("nan")])
def test_untouched(value):
    actual = numbers_to_strings(value)
    assert actual is value


def test_nested():
    value = {
        "amount": 10**30,
        "fee": Decimal("0.50"),
        "hash": "0xabc",
        "ok": True,
        "logs": [{"index": 1, "data": ["2", None]}],
        "pair": (1, "x"),
    }

    assert numbers_to_strings(value) == {
        "amount": "1" + "0" * 30,
        "fee": "0.5",
        "hash": "0xabc",
        "ok": True,
        "logs": [{"index": "1", "data": ["2", None]}],
        "pair": ["1", "x"],
    }


def test_nested_keeps_key_order():
    value = {"b": 1, "a": 2, "c": 3}
    assert list(numbers_to_strings(value)) == ["b", "a", "c"]


def test_does_not_mutate():
    value = {"a": [1, 2]}
    numbers_to_strings(value)
    assert value == {"a": [1, 2]}


class Balance(ValueObject):
    owner: str
    amount: int


def test_pydantic_model():
    actual = numbers_to_strings([Balance(owner="0xabc", amount=2**70)])
    assert actual == [{"owner": "0xabc", "amount": str(2**70)}]


@pytest.mark.parametrize(
    "value",
    [
        12,
        Decimal("10.00"),
        "10.00",
        0.1,
        "0x1f",
        {"a": [Decimal("1.10"), "2.0", 3]},
    ],
)
def test_idempotent(value):
    once = numbers_to_strings(value)
    assert numbers_to_strings(once) == once
