"""Causal tree text CRDT."""

from __future__ import annotations

import enum
from bisect import bisect_left
from dataclasses import dataclass, replace
from functools import cmp_to_key
from typing import Any

from ossa.crdt import CRDT, CausalState, compare_with_tiebreak


class LetterKind(enum.Enum):
    """What an atom of the tree holds."""

    LETTER = "letter"
    DELETE = "delete"
    ROOT = "root"


# Sibling order: letters first, then deletions, then roots.
_KIND_RANK = {LetterKind.LETTER: 0, LetterKind.DELETE: 1, LetterKind.ROOT: 2}


@dataclass(frozen=True)
class Atom:
    """A node payload: its logical time, its kind and, for letters, a value."""

    id: Any
    kind: LetterKind
    value: Any = None


@dataclass(frozen=True)
class CausalTreeOp:
    """Insert ``atom`` as a child of the atom with id ``parent_id``."""

    parent_id: Any
    atom: Atom


@dataclass(frozen=True)
class CausalTree(CRDT):
    """A tree of atoms whose children are kept in causal order."""

    atom: Atom
    children: tuple[CausalTree, ...] = ()

    @classmethod
    def new_root(cls, root_id: Any) -> CausalTree:
        """Create a tree holding only a root atom."""
        return cls(Atom(root_id, LetterKind.ROOT))

    def apply(self, causal_state: CausalState, op: CausalTreeOp) -> CausalTree:
        tree, inserted = _insert_in_weave(causal_state, self, op)
        if not inserted:
            raise ValueError(
                f"parent {op.parent_id!r} has not been applied to the tree"
            )
        return tree


def _compare_atoms(state: CausalState, a1: Atom, a2: Atom) -> int:
    r1, r2 = _KIND_RANK[a1.kind], _KIND_RANK[a2.kind]
    if r1 != r2:
        return -1 if r1 < r2 else 1
    return compare_with_tiebreak(state, a1.id, a2.id)


def _insert_atom(
    state: CausalState, children: tuple[CausalTree, ...], atom: Atom
) -> tuple[CausalTree, ...]:
    key = cmp_to_key(lambda a, b: _compare_atoms(state, a, b))
    index = bisect_left(children, key(atom), key=lambda ct: key(ct.atom))
    if index < len(children) and _compare_atoms(state, children[index].atom, atom) == 0:
        raise ValueError("applied logical times must be unique")
    return children[:index] + (CausalTree(atom),) + children[index:]


def _insert_in_weave(
    state: CausalState, weave: CausalTree, op: CausalTreeOp
) -> tuple[CausalTree, bool]:
    if weave.atom.id == op.parent_id:
        return replace(weave, children=_insert_atom(state, weave.children, op.atom)), True

    inserted = False
    children = []
    for child in weave.children:
        if not inserted:
            child, inserted = _insert_in_weave(state, child, op)
        children.append(child)
    return CausalTree(weave.atom, tuple(children)), inserted