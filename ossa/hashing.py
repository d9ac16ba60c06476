"""SHA-256 digests, base58 text encoding and small numeric helpers."""

from __future__ import annotations

import binascii
import hashlib
import secrets
from dataclasses import dataclass
from typing import Iterable, Iterator, Union

NONCE_SIZE = 32
DIGEST_SIZE = 32

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_INDEX = {c: i for i, c in enumerate(_B58_ALPHABET)}


class HashParseError(ValueError):
    """Raised when text cannot be read as a SHA-256 digest."""


def b58encode(data: bytes) -> str:
    """Encode bytes with the Bitcoin base58 alphabet."""
    data = bytes(data)
    stripped = data.lstrip(b"\x00")
    leading = len(data) - len(stripped)
    number = int.from_bytes(stripped, "big")
    digits = []
    while number:
        number, rem = divmod(number, 58)
        digits.append(_B58_ALPHABET[rem])
    return "1" * leading + "".join(reversed(digits))


def b58decode(text: str) -> bytes:
    """Decode Bitcoin base58 text; raise HashParseError on a bad character."""
    number = 0
    for position, char in enumerate(text):
        try:
            digit = _B58_INDEX[char]
        except KeyError:
            raise HashParseError(
                f"invalid base58 character {char!r} at index {position}"
            ) from None
        number = number * 58 + digit
    leading = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\x00" * leading + body


BytesLike = Union[bytes, bytearray, memoryview, "Sha256Hash"]


@dataclass(frozen=True, order=True)
class Sha256Hash:
    """A 32-byte SHA-256 digest.

    ``repr`` shows it as upper-case hex prefixed with ``0x``; ``str`` shows
    it in base58.
    """

    digest: bytes

    def __post_init__(self) -> None:
        digest = bytes(self.digest)
        if len(digest) != DIGEST_SIZE:
            raise ValueError(f"a SHA-256 digest is {DIGEST_SIZE} bytes, got {len(digest)}")
        object.__setattr__(self, "digest", digest)

    @classmethod
    def of(cls, *args: BytesLike) -> Sha256Hash:
        """Hash the concatenation of the given byte strings or digests."""
        hasher = hashlib.sha256()
        for part in args:
            hasher.update(bytes(part))
        return cls(hasher.digest())

    @classmethod
    def parse(cls, text: str) -> Sha256Hash:
        """Read a digest from hex (with or without ``0x``) or base58 text."""
        raw = text.encode("utf-8")
        if len(raw) in (64, 66):
            hex_part = raw[2:] if len(raw) == 66 else raw
            try:
                return cls(binascii.unhexlify(hex_part))
            except (binascii.Error, ValueError) as err:
                raise HashParseError(f"invalid hex digest: {err}") from err
        decoded = b58decode(text)
        if len(decoded) > DIGEST_SIZE:
            raise HashParseError("base58 value does not fit in 32 bytes")
        return cls(decoded.ljust(DIGEST_SIZE, b"\x00"))

    def to_base58(self) -> str:
        return b58encode(self.digest)

    def to_hex(self) -> str:
        """Upper-case hex with a ``0x`` prefix."""
        return "0x" + self.digest.hex().upper()

    def __bytes__(self) -> bytes:
        return self.digest

    def __repr__(self) -> str:
        return self.to_hex()

    def __str__(self) -> str:
        return self.to_base58()


def generate_nonce() -> bytes:
    """Return 32 random bytes from the operating system."""
    return secrets.token_bytes(NONCE_SIZE)


def compress_consecutive_into_ranges(values: Iterable[int]) -> Iterator[range]:
    """Group sorted integers into runs of consecutive values."""
    start = end = None
    for x in values:
        if start is None:
            start, end = x, x + 1
        elif end == x:
            end = x + 1
        else:
            yield range(start, end)
            start, end = x, x + 1
    if start is not None:
        yield range(start, end)


def is_power_of_two(x: int) -> bool:
    """Check whether ``x`` is a power of two; zero counts as one."""
    return (x & ((x - 1) & 0xFFFFFFFFFFFFFFFF)) == 0