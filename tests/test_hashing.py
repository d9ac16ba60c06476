import hashlib

import pytest

from ossa.hashing import (
    HashParseError,
    Sha256Hash,
    b58decode,
    b58encode,
    compress_consecutive_into_ranges,
    generate_nonce,
    is_power_of_two,
)

EMPTY_HEX = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_nonces_differ():
    n1 = generate_nonce()
    n2 = generate_nonce()
    assert n1 != n2
    assert len(n1) == 32


def test_single_number():
    assert list(compress_consecutive_into_ranges([5])) == [range(5, 6)]


def test_consecutive_numbers():
    assert list(compress_consecutive_into_ranges([1, 2, 3, 4, 5])) == [range(1, 6)]


def test_split():
    assert list(compress_consecutive_into_ranges([1, 4])) == [range(1, 2), range(4, 5)]


def test_mixed_numbers():
    numbers = [1, 2, 3, 7, 8, 10, 11, 12, 15]
    assert list(compress_consecutive_into_ranges(numbers)) == [
        range(1, 4),
        range(7, 9),
        range(10, 13),
        range(15, 16),
    ]


def test_compress_empty():
    assert list(compress_consecutive_into_ranges([])) == []


@pytest.mark.parametrize(
    "value, expected",
    [(0, True), (1, True), (2, True), (3, False), (64, True), (96, False), (1 << 63, True)],
)
def test_is_power_of_two(value, expected):
    assert is_power_of_two(value) is expected


def test_of_empty_matches_known_digest():
    assert Sha256Hash.of().digest.hex() == EMPTY_HEX
    assert Sha256Hash.of(b"") == Sha256Hash.parse(EMPTY_HEX)


def test_of_is_incremental():
    assert Sha256Hash.of(b"hello", b"world") == Sha256Hash.of(b"helloworld")


def test_of_accepts_digests():
    inner = Sha256Hash.of(b"x")
    assert Sha256Hash.of(inner).digest == hashlib.sha256(inner.digest).digest()


def test_parse_hex_with_prefix():
    text = "0xA01BE6E4A62BA7D0988FD6F1FE5DC964FD818628A96B472AA3472E6EFFB9A74F"
    h = Sha256Hash.parse(text)
    assert h.to_hex() == text
    assert repr(h) == text


def test_parse_hex_lowercase():
    assert Sha256Hash.parse(EMPTY_HEX).to_hex() == "0x" + EMPTY_HEX.upper()


def test_parse_bad_hex():
    with pytest.raises(HashParseError):
        Sha256Hash.parse("zz" * 32)


def test_base58_round_trip():
    h = Sha256Hash.of(b"round trip")
    assert Sha256Hash.parse(str(h)) == h
    assert str(h) == h.to_base58()


def test_base58_short_value_pads_zeros():
    assert Sha256Hash.parse("1").digest == bytes(32)


def test_base58_too_long():
    with pytest.raises(HashParseError):
        Sha256Hash.parse(b58encode(b"\xff" * 33))


def test_base58_bad_character():
    with pytest.raises(HashParseError):
        Sha256Hash.parse("0OIl")


def test_b58_known_values():
    assert b58encode(b"hello world") == "StV1DL6CwTryKyV"
    assert b58encode(b"\x00\x00\x01") == "112"
    assert b58decode("StV1DL6CwTryKyV") == b"hello world"
    assert b58decode("112") == b"\x00\x00\x01"


def test_ordering_is_bytewise():
    low = Sha256Hash(bytes(31) + b"\x01")
    high = Sha256Hash(b"\x01" + bytes(31))
    assert low < high
    assert sorted([high, low]) == [low, high]


def test_wrong_length_rejected():
    with pytest.raises(ValueError):
        Sha256Hash(b"short")


def test_bytes_conversion():
    h = Sha256Hash.of(b"abc")
    assert bytes(h) == hashlib.sha256(b"abc").digest()