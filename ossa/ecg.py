"""Eventually consistent graph (ECG) of operation headers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any, Hashable, Iterator, Sequence

logger = logging.getLogger(__name__)

# Every root node sits directly below the initial state.
ROOT_DEPTH = 1


class ECGHeader(ABC):
    """A node of the ECG: it names its parents and its own identifier."""

    @abstractmethod
    def parent_ids(self) -> Sequence[Hashable]:
        """Return the ids of the parent headers; empty means the root is the parent."""

    @abstractmethod
    def header_id(self) -> Hashable:
        """Compute the identifier of this header."""

    @abstractmethod
    def validate_header(self, header_id: Hashable) -> bool:
        """Check that the header is well formed for ``header_id``."""


@dataclass
class NodeInfo:
    """What the graph stores for one header."""

    depth: int
    """The minimum depth of the node; root nodes have depth 1."""
    header: ECGHeader
    operations: bytes
    """Raw serialized operations of the header's body."""


class ECGState:
    """The dependency graph of headers, its root nodes and its tips."""

    def __init__(self) -> None:
        self._nodes: dict[Any, NodeInfo] = {}
        self._parents: dict[Any, tuple] = {}
        self._children: dict[Any, list] = {}
        self._root_nodes: set = set()
        self._tips: set = set()

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, header_id: object) -> bool:
        return header_id in self._nodes

    def tips(self) -> frozenset:
        """Ids of the headers that no other header depends on."""
        return frozenset(self._tips)

    def contains(self, header_id: Any) -> bool:
        return header_id in self._nodes

    def get_parents(self, header_id: Any) -> list | None:
        """Return the parent ids of a node, or None if it is unknown.

        An empty list means the node is a root node.
        """
        if header_id not in self._nodes:
            return None
        return list(self._parents[header_id])

    def get_parents_with_depth(self, header_id: Any) -> list[tuple[int, Any]] | None:
        """Return ``(depth, parent_id)`` pairs, or None if the node is unknown."""
        if header_id not in self._nodes:
            return None
        return [(self._nodes[p].depth, p) for p in self._parents[header_id]]

    def get_children_with_depth(self, header_id: Any) -> list[tuple[int, Any]] | None:
        """Return ``(depth, child_id)`` pairs, or None if the node is unknown.

        An empty list means the node is a leaf.
        """
        if header_id not in self._nodes:
            return None
        return [(self._nodes[c].depth, c) for c in self._children[header_id]]

    def get_header(self, header_id: Any) -> ECGHeader | None:
        node = self._nodes.get(header_id)
        return None if node is None else node.header

    def get_header_depth(self, header_id: Any) -> int | None:
        node = self._nodes.get(header_id)
        return None if node is None else node.depth

    def get_node(self, header_id: Any) -> NodeInfo | None:
        return self._nodes.get(header_id)

    def is_root_node(self, header_id: Any) -> bool:
        return header_id in self._root_nodes

    def root_nodes_with_depth(self) -> Iterator[tuple[int, Any]]:
        """Yield ``(depth, id)`` for every root node, in id order."""
        for header_id in sorted(self._root_nodes):
            yield ROOT_DEPTH, header_id

    def insert_header(self, header: ECGHeader, operations: bytes) -> bool:
        """Add a header whose parents are all known; return whether it was added."""
        header_id = header.header_id()

        if not header.validate_header(header_id):
            logger.debug("Invalid header: %r", header_id)
            return False

        if header_id in self._nodes:
            logger.debug("Already have header: %r", header_id)
            return False

        parents = tuple(header.parent_ids())
        if not parents:
            if header_id in self._root_nodes:
                logger.error(
                    "Invariant violated: header in root nodes but not in the graph: %r",
                    header_id,
                )
                return False
            self._root_nodes.add(header_id)
            depth = ROOT_DEPTH
        else:
            missing = [p for p in parents if p not in self._nodes]
            if missing:
                logger.error("Received a header with unknown parents: %r", header_id)
                return False
            depth = min(self._nodes[p].depth for p in parents) + 1
            self._tips.difference_update(parents)

        # A newly received header is always a leaf.
        self._tips.add(header_id)
        self._nodes[header_id] = NodeInfo(depth, header, bytes(operations))
        self._parents[header_id] = parents
        self._children[header_id] = []
        for parent in parents:
            self._children[parent].append(header_id)
        return True

    def is_ancestor_of(self, ancestor: Any, descendant: Any) -> bool | None:
        """Breadth-first check that ``ancestor`` is (or equals) an ancestor of ``descendant``.

        Returns None when either id is not in the graph.
        """
        if ancestor not in self._nodes or descendant not in self._nodes:
            return None
        queue = deque([descendant])
        visited = {descendant}
        while queue:
            current = queue.popleft()
            if current == ancestor:
                return True
            for parent in self._parents[current]:
                if parent not in visited:
                    visited.add(parent)
                    queue.append(parent)
        return False

    def _edges(self) -> set:
        return {(p, child) for child, parents in self._parents.items() for p in parents}

    def same_dag(self, other: ECGState) -> bool:
        """Check that both states hold the same nodes, edges, roots and tips."""
        return (
            self._root_nodes == other._root_nodes
            and self._tips == other._tips
            and self._edges() == other._edges()
            and set(self._nodes) == set(other._nodes)
        )

    def copy(self) -> ECGState:
        """Return an independent copy of the graph; headers are shared."""
        clone = ECGState()
        clone._nodes = {
            k: NodeInfo(v.depth, v.header, v.operations) for k, v in self._nodes.items()
        }
        clone._parents = dict(self._parents)
        clone._children = {k: list(v) for k, v in self._children.items()}
        clone._root_nodes = set(self._root_nodes)
        clone._tips = set(self._tips)
        return clone