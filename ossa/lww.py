"""Last-writer-wins register."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ossa.crdt import CRDT, CausalState, compare_with_tiebreak


@dataclass(frozen=True)
class LWW(CRDT):
    """A register holding the value written at the latest time.

    An operation on the register is itself an ``LWW`` carrying the new time
    and value.
    """

    time: Any
    value: Any

    def apply(self, causal_state: CausalState, op: LWW) -> LWW:
        order = compare_with_tiebreak(causal_state, self.time, op.time)
        if order < 0:
            return op
        if order > 0:
            return self
        raise ValueError("applied logical times must be unique")