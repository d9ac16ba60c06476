"""CRDTs, SHA-256 Merkle trees and eventual causal graphs for replicated stores."""

__version__ = "0.0.1"

__all__ = [
    "crdt",
    "lww",
    "twopmap",
    "causal_tree",
    "hashing",
    "merkle_tree",
    "causal_time",
    "ecg",
    "ecg_v0",
]