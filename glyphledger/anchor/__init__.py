"""Anchor subpackage: Merkle roots and inclusion proofs.

One content-addressing and proof module shared by every producer and
consumer of leaf hashes.
"""
from .hash import hash_pair, to_digest, to_hex
from .merkle import MerkleTree, build_proof, build_root, build_tree
from .verify import (
    LEFT,
    RIGHT,
    ProofStep,
    proof_from_json,
    proof_to_json,
    proves_inclusion,
    verify_proof,
)

__all__ = [
    "MerkleTree",
    "build_tree",
    "build_root",
    "build_proof",
    "ProofStep",
    "LEFT",
    "RIGHT",
    "verify_proof",
    "proves_inclusion",
    "proof_to_json",
    "proof_from_json",
    "hash_pair",
    "to_digest",
    "to_hex",
]
