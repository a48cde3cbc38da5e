import pytest

from keyset_python import InvalidOrderQueryConfig
from keyset_python import PageKeyCodec


@pytest.fixture
def codec() -> PageKeyCodec:
    return PageKeyCodec(
        ["block_number", "transaction_index"],
        converters={"block_number": int, "transaction_index": int},
    )


def test_encode(codec):
    record = {"transaction_index": 3, "block_number": 18291023, "hash": "0xabc"}
    assert codec.encode(record) == "18291023-3"


def test_decode(codec):
    assert codec.decode("18291023-3") == {
        "block_number": 18291023,
        "transaction_index": 3,
    }


def test_decode_without_converters():
    codec = PageKeyCodec(["hash"])
    assert codec.decode("0xabc") == {"hash": "0xabc"}


@pytest.mark.parametrize(
    "key", [None, "", "18291023", "18291023-3-1", "-", "abc-3", "18291023-"]
)
def test_decode_unusable(codec, key):
    assert codec.decode(key) is None


def test_custom_delimiter():
    codec = PageKeyCodec(["block_number", "log_index"], delimiter=":")
    assert codec.encode({"block_number": 1, "log_index": 2}) == "1:2"
    assert codec.decode("1:2") == {"block_number": 1, "log_index": 2}


def test_no_attributes():
    with pytest.raises(InvalidOrderQueryConfig):
        PageKeyCodec([])


@pytest.mark.parametrize(
    "key,expected",
    [
        ("18291023-3", {"block_number": 18291023, "transaction_index": 3}),
        ("0-0", {"block_number": 0, "transaction_index": 0}),
        ("0xab-3", {"block_number": "0xab", "transaction_index": 3}),
        ("007-3", {"block_number": "007", "transaction_index": 3}),
    ],
)
def test_decode_infers_integers(key, expected):
    codec = PageKeyCodec(["block_number", "transaction_index"])
    assert codec.decode(key) == expected


def test_decode_explicit_str_converter():
    codec = PageKeyCodec(["account", "nonce"], converters={"account": str})
    assert codec.decode("12-3") == {"account": "12", "nonce": 3}


def test_decode_round_trips_record_values():
    codec = PageKeyCodec(["block_number", "hash"])
    record = {"block_number": 12, "hash": "0xabc"}
    assert codec.decode(codec.encode(record)) == record
