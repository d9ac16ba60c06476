"""Binary merkle trees over SHA-256 digests, complete and partially known."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Union

from ossa.hashing import Sha256Hash

Chunk = Union[bytes, bytearray, memoryview]


def _node_count_for_leaf_count(leaf_count: int) -> int:
    if leaf_count < 1:
        raise ValueError("a merkle tree needs at least one leaf")
    return 2 * leaf_count - 1


def _is_leaf(leaf_count: int, index: int) -> bool:
    return index >= leaf_count - 1


def _layer_count(leaf_count: int) -> int:
    """Number of layers: log2 of the next power of two, plus one."""
    return (leaf_count - 1).bit_length() + 1


def _hash_pair(left: Sha256Hash, right: Sha256Hash) -> Sha256Hash:
    return Sha256Hash.of(left, right)


@dataclass(frozen=True)
class MerkleTree:
    """A binary merkle tree stored as a flattened breadth-first list.

    The root is at index 0 and the children of node ``i`` are at ``2i + 1``
    and ``2i + 2``. The tree's size and shape are fixed by its leaf count, so
    a leaf cannot be swapped for a branch.
    """

    nodes: tuple[Sha256Hash, ...]

    @classmethod
    def _from_leaves(cls, leaves: Sequence[Sha256Hash]) -> MerkleTree:
        if not leaves:
            raise ValueError("leaves must be non-empty")
        leaf_count = len(leaves)
        capacity = _node_count_for_leaf_count(leaf_count)
        nodes: list[Sha256Hash | None] = [None] * capacity
        remaining = iter(leaves)

        # Build from the bottom layer up; leaves fill leaf positions in order.
        for layer in reversed(range(_layer_count(leaf_count))):
            start = (1 << layer) - 1
            end = min((1 << (layer + 1)) - 1, capacity)
            for i in range(start, end):
                if _is_leaf(leaf_count, i):
                    nodes[i] = next(remaining)
                else:
                    nodes[i] = _hash_pair(nodes[2 * i + 1], nodes[2 * i + 2])
        return cls(tuple(nodes))

    @classmethod
    def from_chunks(cls, chunks: Iterable[Chunk]) -> MerkleTree:
        """Build a tree whose leaves are the hashes of ``chunks``.

        With no chunks at all, the tree holds the hash of the empty chunk.
        """
        leaves = [Sha256Hash.of(chunk) for chunk in chunks]
        if not leaves:
            leaves = [Sha256Hash.of(b"")]
        return cls._from_leaves(leaves)

    def merkle_root(self) -> Sha256Hash:
        return self.nodes[0]

    def get(self, index: int) -> Sha256Hash | None:
        """Return the node at ``index``, or None when out of range."""
        if 0 <= index < len(self.nodes):
            return self.nodes[index]
        return None

    def leaf_count(self) -> int:
        return (len(self.nodes) + 1) // 2

    def _index_for_leaf(self, leaf_index: int) -> int:
        leaf_count = self.leaf_count()
        if not 0 <= leaf_index < leaf_count:
            raise IndexError(f"leaf index {leaf_index} out of range for {leaf_count} leaves")
        start = (1 << (leaf_count - 1).bit_length()) - 1
        index = start + leaf_index
        if index >= len(self.nodes):
            index -= leaf_count
        return index

    def validate_chunk(self, leaf_index: int, chunk: Chunk) -> bool:
        """Check that ``chunk`` hashes to the leaf at ``leaf_index``."""
        return self.nodes[self._index_for_leaf(leaf_index)] == Sha256Hash.of(chunk)


class PotentialState(enum.Enum):
    """How much is known about a node of a partial tree."""

    NONE = "none"
    UNVERIFIED = "unverified"
    VERIFIED = "verified"


class PartialMerkleTree:
    """A merkle tree being filled in from untrusted sources.

    Only the root is known at first. Proposed node hashes stay unverified
    until both siblings are present and hash to their verified parent.
    """

    def __init__(self, merkle_root: Sha256Hash, leaf_count: int) -> None:
        capacity = _node_count_for_leaf_count(leaf_count)
        self._states = [PotentialState.NONE] * capacity
        self._values: list[Sha256Hash | None] = [None] * capacity
        self._states[0] = PotentialState.VERIFIED
        self._values[0] = merkle_root

    def __len__(self) -> int:
        return len(self._states)

    def leaf_count(self) -> int:
        return (len(self._states) + 1) // 2

    def state(self, index: int) -> PotentialState:
        """Return what is known about the node at ``index``."""
        return self._states[index]

    def missing_indices(self) -> Iterator[int]:
        """Yield the indices of nodes with no proposed value."""
        for index, state in enumerate(self._states):
            if state is PotentialState.NONE:
                yield index

    def set(self, index: int, value: Sha256Hash) -> bool:
        """Propose ``value`` for a node; return False if it is shown invalid.

        A True result may be a false positive when the sibling came from
        another source.
        """
        if not 0 <= index < len(self._states):
            return False
        state = self._states[index]
        if state is PotentialState.UNVERIFIED:
            # Keep the earlier proposal without penalising either source.
            return True
        if state is PotentialState.VERIFIED:
            return self._values[index] == value

        self._states[index] = PotentialState.UNVERIFIED
        self._values[index] = value
        result = self._validate_children((index - 1) // 2)
        return True if result is None else result

    def _validate_children(self, index: int) -> bool | None:
        if _is_leaf(self.leaf_count(), index):
            return None
        if self._states[index] is not PotentialState.VERIFIED:
            return None
        left_index, right_index = 2 * index + 1, 2 * index + 2
        left_state, right_state = self._states[left_index], self._states[right_index]
        if PotentialState.NONE in (left_state, right_state):
            return None
        if not (left_state is right_state is PotentialState.UNVERIFIED):
            raise RuntimeError("sibling nodes must be verified together")

        left, right = self._values[left_index], self._values[right_index]
        if _hash_pair(left, right) == self._values[index]:
            self._states[left_index] = PotentialState.VERIFIED
            self._states[right_index] = PotentialState.VERIFIED
            self._validate_children(left_index)
            self._validate_children(right_index)
            return True

        for i in (left_index, right_index):
            self._states[i] = PotentialState.NONE
            self._values[i] = None
        return False

    def try_complete(self) -> MerkleTree | None:
        """Return the full tree once every node is verified, else None."""
        if any(state is not PotentialState.VERIFIED for state in self._states):
            return None
        return MerkleTree(tuple(self._values))