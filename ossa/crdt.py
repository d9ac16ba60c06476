"""Core CRDT interfaces and utilities for causal time."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class CausalState(ABC, Generic[T]):
    """Knows the causal order between logical times."""

    @abstractmethod
    def happens_before(self, t1: T, t2: T) -> bool:
        """Return True if ``t1`` causally precedes ``t2``."""


class CRDT(ABC):
    """A conflict-free replicated data type updated by operations.

    Every operation applied to a state, across all calls, must carry a unique
    logical time. Applying concurrent operations commutes.
    """

    @abstractmethod
    def apply(self, causal_state: CausalState, op: Any) -> CRDT:
        """Return the state that results from applying ``op``."""


def concurrent(state: CausalState[T], t1: T, t2: T) -> bool:
    """Return True if neither time happens before the other."""
    return not state.happens_before(t1, t2) and not state.happens_before(t2, t1)


def compare_with_tiebreak(state: CausalState[T], t1: T, t2: T) -> int:
    """Order two times causally, falling back to their total order.

    Returns a negative number, zero or a positive number like a classic
    comparison function.
    """
    if state.happens_before(t1, t2):
        return -1
    if state.happens_before(t2, t1):
        return 1
    # Concurrent operations fall back to the total order on time.
    if t1 < t2:
        return -1
    if t2 < t1:
        return 1
    return 0


@dataclass(frozen=True, order=True)
class LamportTimestamp:
    """A wall-clock timestamp paired with the identity of its author.

    The total order compares timestamps first and identities second.
    """

    timestamp: int
    id: Any

    @classmethod
    def current(cls, user: Any) -> LamportTimestamp:
        """Create a timestamp for ``user`` at the present moment."""
        return cls(time.time_ns(), user)


class LamportState(CausalState[LamportTimestamp]):
    """Causal order for Lamport timestamps: only a single author's times are ordered."""

    def happens_before(self, t1: LamportTimestamp, t2: LamportTimestamp) -> bool:
        return t1.id == t2.id and t1.timestamp < t2.timestamp