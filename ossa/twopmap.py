"""Two-phase map: keys can be inserted once and removed for good."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Union

from ossa.crdt import CRDT, CausalState


@dataclass(frozen=True)
class TwoPMapInsert:
    """Insert ``value`` under ``key``."""

    key: Any
    value: Any


@dataclass(frozen=True)
class TwoPMapApply:
    """Apply ``operation`` to the value stored under ``key``."""

    key: Any
    operation: Any


@dataclass(frozen=True)
class TwoPMapDelete:
    """Remove ``key`` permanently."""

    key: Any


TwoPMapOp = Union[TwoPMapInsert, TwoPMapApply, TwoPMapDelete]


class TwoPMap(CRDT):
    """A map whose values are CRDTs; deleted keys leave a tombstone.

    Keys are the logical times of the operations that inserted them, so every
    key is unique. Operations on a tombstoned key are ignored.
    """

    __slots__ = ("_entries", "_tombstones")

    def __init__(self, entries: Mapping[Any, CRDT] | None = None, tombstones=()) -> None:
        self._entries = dict(entries or {})
        self._tombstones = frozenset(tombstones)

    @property
    def tombstones(self) -> frozenset:
        return self._tombstones

    def apply(self, causal_state: CausalState, op: TwoPMapOp) -> TwoPMap:
        if op.key in self._tombstones:
            return self

        entries = dict(self._entries)
        tombstones = self._tombstones
        if isinstance(op, TwoPMapInsert):
            if op.key in entries:
                raise ValueError(f"key already exists in TwoPMap: {op.key!r}")
            entries[op.key] = op.value
        elif isinstance(op, TwoPMapApply):
            if op.key not in entries:
                raise KeyError(op.key)
            entries[op.key] = entries[op.key].apply(causal_state, op.operation)
        elif isinstance(op, TwoPMapDelete):
            entries.pop(op.key, None)
            tombstones = tombstones | {op.key}
        else:
            raise TypeError(f"unknown TwoPMap operation: {op!r}")
        return TwoPMap(entries, tombstones)

    def get(self, key: Any) -> Any:
        """Return the value for ``key``, or None when it is absent."""
        return self._entries.get(key)

    def items(self) -> Iterator[tuple[Any, Any]]:
        """Yield key, value pairs in key order."""
        for key in sorted(self._entries):
            yield key, self._entries[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TwoPMap):
            return NotImplemented
        return self._entries == other._entries and self._tombstones == other._tombstones

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return "{" + body + "}"

    def to_dict(self) -> dict:
        """Return a plain structure with the fields ``map`` and ``tombstones``."""
        return {
            "map": dict(self.items()),
            "tombstones": sorted(self._tombstones),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TwoPMap:
        """Build a map from the structure produced by :meth:`to_dict`."""
        unknown = set(data) - {"map", "tombstones"}
        if unknown:
            raise ValueError(f"unknown field(s): {', '.join(sorted(unknown))}")
        for name in ("map", "tombstones"):
            if name not in data:
                raise ValueError(f"missing field `{name}`")
        return cls(dict(data["map"]), data["tombstones"])


def insert_op(key: Any, value: Any) -> TwoPMapInsert:
    """Build an operation inserting ``value`` under ``key``."""
    return TwoPMapInsert(key, value)