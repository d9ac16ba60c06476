"""Times that may point at the operation batch currently being built."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

from ossa.lww import LWW
from ossa.twopmap import TwoPMapApply, TwoPMapDelete, TwoPMapInsert

MAX_OPERATION_POSITION = 255


class _CausalTimeOrder:
    """Orders current-batch times before concrete times, then by payload."""

    def _sort_key(self) -> tuple:
        raise NotImplementedError

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, _CausalTimeOrder):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, _CausalTimeOrder):
            return NotImplemented
        return self._sort_key() <= other._sort_key()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, _CausalTimeOrder):
            return NotImplemented
        return self._sort_key() > other._sort_key()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, _CausalTimeOrder):
            return NotImplemented
        return self._sort_key() >= other._sort_key()


@dataclass(frozen=True)
class CurrentTime(_CausalTimeOrder):
    """Points at an operation in the current ECG node."""

    operation_position: int

    def __post_init__(self) -> None:
        if not 0 <= self.operation_position <= MAX_OPERATION_POSITION:
            raise ValueError(
                f"operation position must be in 0..{MAX_OPERATION_POSITION}, "
                f"got {self.operation_position}"
            )

    def _sort_key(self) -> tuple:
        return (0, self.operation_position)


@dataclass(frozen=True)
class AtTime(_CausalTimeOrder):
    """Points at an operation in another ECG node."""

    time: Any

    def _sort_key(self) -> tuple:
        return (1, self.time)


CausalTime = Union[CurrentTime, AtTime]


def current_time(operation_position: int) -> CurrentTime:
    return CurrentTime(operation_position)


def at_time(time: Any) -> AtTime:
    return AtTime(time)


Concretize = Callable[[Any, Any], Any]


def concretize_lww(src: LWW, current_header: Any, concretize_time: Concretize) -> LWW:
    """Resolve the time of a serialized register write against ``current_header``."""
    return LWW(concretize_time(src.time, current_header), src.value)


def concretize_twopmap_op(
    src: Any,
    current_header: Any,
    concretize_key: Concretize,
    concretize_value: Concretize,
    concretize_op: Concretize,
) -> Any:
    """Resolve the times inside a serialized two-phase map operation."""
    key = concretize_key(src.key, current_header)
    if isinstance(src, TwoPMapInsert):
        return TwoPMapInsert(key, concretize_value(src.value, current_header))
    if isinstance(src, TwoPMapApply):
        return TwoPMapApply(key, concretize_op(src.operation, current_header))
    if isinstance(src, TwoPMapDelete):
        return TwoPMapDelete(key)
    raise TypeError(f"unknown TwoPMap operation: {src!r}")