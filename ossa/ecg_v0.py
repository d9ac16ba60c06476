"""Version 0 ECG headers, bodies and operation identifiers."""

from __future__ import annotations

import functools
import secrets
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence

import cbor2

from ossa.causal_time import AtTime, CurrentTime
from ossa.crdt import CausalState
from ossa.ecg import ECGHeader, ECGState
from ossa.hashing import Sha256Hash

MAX_OPERATION_COUNT = 256
_U8_MAX = 255


def _check_u8(name: str, value: int) -> None:
    if not 0 <= value <= _U8_MAX:
        raise ValueError(f"{name} must be in 0..{_U8_MAX}, got {value}")


def _digest_wire(value: Sha256Hash) -> list[int]:
    # A fixed-size byte array is written as a sequence of small integers.
    return list(bytes(value))


@dataclass(frozen=True, order=True)
class HeaderId:
    """The identifier of an ECG header: the hash of its serialized form."""

    value: Sha256Hash

    def __repr__(self) -> str:
        return f"HeaderId({self.value!r})"


@dataclass(frozen=True)
class Header(ECGHeader):
    """An ECG header naming its parents and committing to its body."""

    nonce: int
    parents: tuple[HeaderId, ...]
    operations_count: int
    operations_hash: Sha256Hash

    def __post_init__(self) -> None:
        _check_u8("nonce", self.nonce)
        _check_u8("operations_count", self.operations_count)
        object.__setattr__(self, "parents", tuple(self.parents))

    def parent_ids(self) -> Sequence[HeaderId]:
        return self.parents

    def header_id(self) -> HeaderId:
        return HeaderId(Sha256Hash.of(self.to_cbor()))

    def validate_header(self, header_id: HeaderId) -> bool:
        """Check that ``header_id`` is the identifier this header hashes to."""
        return header_id == self.header_id()

    def to_cbor(self) -> bytes:
        """Serialize the header as a CBOR map in field order."""
        return cbor2.dumps(
            {
                "nonce": self.nonce,
                "parent_ids": [_digest_wire(p.value) for p in self.parents],
                "operations_count": self.operations_count,
                "operations_hash": _digest_wire(self.operations_hash),
            }
        )


class Body:
    """The batch of serialized operations that belongs to one header."""

    __slots__ = ("_operations",)

    def __init__(self, operations: Iterable[Any] = ()) -> None:
        ops = tuple(operations)
        if len(ops) > MAX_OPERATION_COUNT:
            raise ValueError("exceeded the maximum number of batched operations")
        self._operations = ops

    def __len__(self) -> int:
        return len(self._operations)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Body):
            return NotImplemented
        return self._operations == other._operations

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Body({list(self._operations)!r})"

    def operations(
        self, header_id: HeaderId, concretize: Callable[[Any, HeaderId], Any]
    ) -> Iterator[Any]:
        """Yield each operation with its times resolved against ``header_id``."""
        for op in self._operations:
            yield concretize(op, header_id)

    def operations_count(self) -> int:
        count = len(self._operations)
        if count > _U8_MAX:
            raise OverflowError(f"operation count {count} does not fit in a byte")
        return count

    def new_header(self, parents: Iterable[HeaderId]) -> Header:
        """Create a header for this body with a random nonce and sorted parents."""
        return Header(
            nonce=secrets.randbelow(_U8_MAX + 1),
            parents=tuple(sorted(set(parents))),
            operations_count=self.operations_count(),
            operations_hash=self.hash(),
        )

    def hash(self) -> Sha256Hash:
        return Sha256Hash.of(self.to_cbor())

    def to_cbor(self) -> bytes:
        return cbor2.dumps({"operations": list(self._operations)})

    @classmethod
    def from_cbor(cls, data: bytes) -> Body:
        """Read a body written by :meth:`to_cbor`."""
        decoded = cbor2.loads(data)
        if not isinstance(decoded, dict):
            raise ValueError("expected struct Body")
        unknown = set(decoded) - {"operations"}
        if unknown:
            raise ValueError(f"unknown field(s): {', '.join(sorted(map(str, unknown)))}")
        if "operations" not in decoded:
            raise ValueError("missing field `operations`")
        return cls(decoded["operations"])


@functools.total_ordering
@dataclass(frozen=True)
class OperationId:
    """A header id (None for the initial state) and a position in its batch."""

    header_id: Optional[HeaderId]
    operation_position: int

    def __post_init__(self) -> None:
        _check_u8("operation_position", self.operation_position)

    def _sort_key(self) -> tuple:
        return (self.header_id is not None, self.header_id, self.operation_position)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, OperationId):
            return NotImplemented
        return self._sort_key() < other._sort_key()


def concretize_operation_id(src: Any, current_header: HeaderId) -> OperationId:
    """Resolve a causal time into an operation id for ``current_header``."""
    if isinstance(src, CurrentTime):
        return OperationId(current_header, src.operation_position)
    if isinstance(src, AtTime):
        return src.time
    raise TypeError(f"not a causal time: {src!r}")


class ECGCausalState(CausalState[OperationId]):
    """Causal order of operation ids given by the ancestry in an ECG."""

    def __init__(self, ecg_state: ECGState) -> None:
        self.ecg_state = ecg_state

    def happens_before(self, a: OperationId, b: OperationId) -> bool:
        if a.header_id == b.header_id:
            return a.operation_position < b.operation_position
        if a.header_id is None:
            return True
        if b.header_id is None:
            return False
        result = self.ecg_state.is_ancestor_of(a.header_id, b.header_id)
        if result is None:
            raise KeyError(f"unknown header id: {a.header_id!r} or {b.header_id!r}")
        return result


@dataclass(frozen=True)
class PlainHeader(ECGHeader):
    """A header that simply stores its own id and its parents' ids."""

    id: int
    parents: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "parents", tuple(self.parents))

    def parent_ids(self) -> Sequence[int]:
        return self.parents

    def header_id(self) -> int:
        return self.id

    def validate_header(self, header_id: int) -> bool:
        """Check that ``header_id`` is the id this header stores."""
        return header_id == self.id