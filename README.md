# ossa

Building blocks for replicated, eventually consistent stores. The package is a
library. It has no command-line tools.

## What is inside

- `ossa.crdt` has the abstract `CRDT` and `CausalState` classes. It also has
  `concurrent` and `compare_with_tiebreak`, which fall back to the total order
  of times for concurrent operations. `LamportTimestamp` and `LamportState`
  give a simple time type and its causal order: only the times of a single
  author are ordered.
- `ossa.lww.LWW` is a last-writer-wins register. Its operations are `LWW`
  values themselves. Applying two writes with the same time raises
  `ValueError`.
- `ossa.twopmap.TwoPMap` is a two-phase map whose values are CRDTs. Its
  operations are `TwoPMapInsert`, `TwoPMapApply` and `TwoPMapDelete`, and
  `insert_op` builds an insert. A deleted key leaves a tombstone, and later
  operations on that key are ignored. `to_dict` and `from_dict` convert the
  map to and from a plain structure with the fields `map` and `tombstones`.
- `ossa.causal_tree.CausalTree` is a causal tree for collaborative text. It is
  made of `Atom`s of kind `LetterKind.LETTER`, `DELETE` or `ROOT`. Each atom is
  inserted by a `CausalTreeOp` under its parent's id.
- `ossa.hashing.Sha256Hash` is a 32-byte digest:
  - `Sha256Hash.of(...)` hashes byte strings.
  - `parse` reads hex (with or without `0x`) or base58 and raises
    `HashParseError` on bad input.
  - `to_hex` and `to_base58` print the digest.
  - The module also has `b58encode`, `b58decode`, `generate_nonce`,
    `compress_consecutive_into_ranges` and `is_power_of_two`.
- `ossa.merkle_tree.MerkleTree` is a binary Merkle tree built from data chunks
  with `from_chunks`. `validate_chunk` checks a chunk against its leaf.
  `PartialMerkleTree` starts from a known root and accepts proposed node
  hashes one by one with `set`. It verifies them against their parent. Once
  every node is verified, `try_complete` returns the full tree.
- `ossa.causal_time` has `CurrentTime` (an operation in the batch being built)
  and `AtTime` (an operation elsewhere). `concretize_lww` and
  `concretize_twopmap_op` resolve such times against a header id.
- `ossa.ecg.ECGState` is a DAG of headers (`ECGHeader` subclasses):
  - `insert_header` accepts a header only when all its parents are known.
  - The state tracks root nodes, tips and node depths.
  - `is_ancestor_of` answers ancestry queries.
  - `same_dag` compares two graphs.
- `ossa.ecg_v0` has the concrete types for the graph:
  - `Header`, whose `HeaderId` is the SHA-256 of its CBOR form.
  - `Body`, a batch of at most 256 operations. It can be serialized with
    `to_cbor`/`from_cbor`, and `new_header` builds its header.
  - `OperationId`, and `concretize_operation_id` to resolve a causal time into
    one.
  - `ECGCausalState`, which orders operation ids by ancestry in an
    `ECGState`.
  - `PlainHeader`, a header that just stores an integer id and its parents.

## Examples

```python
from ossa.hashing import Sha256Hash
from ossa.merkle_tree import MerkleTree

tree = MerkleTree.from_chunks([b"hello", b"world"])
print(tree.merkle_root().to_hex())
assert tree.validate_chunk(0, b"hello")
assert Sha256Hash.parse(tree.merkle_root().to_base58()) == tree.merkle_root()
```

```python
from ossa.crdt import LamportState, LamportTimestamp
from ossa.lww import LWW

register = LWW(LamportTimestamp(1, "alice"), "first")
register = register.apply(LamportState(), LWW(LamportTimestamp(2, "bob"), "second"))
assert register.value == "second"
```

```python
from ossa.ecg import ECGState
from ossa.ecg_v0 import PlainHeader

graph = ECGState()
graph.insert_header(PlainHeader(1), b"")
graph.insert_header(PlainHeader(2, (1,)), b"")
assert graph.tips() == frozenset({2})
assert graph.is_ancestor_of(1, 2)
```

## What the package does not do

The package has the data structures of a replicated store, but not the store
itself:

- It does not talk to peers over a network.
- It does not download or serve metadata, Merkle nodes or blocks.
- It does not keep anything on disk.
- It has no user interface.

Applying the operations of received headers to a CRDT, and passing headers
between replicas, is left to the code that uses it.

## Tests

Install the package with its `test` extra, which adds pytest, and run pytest
from the project directory.