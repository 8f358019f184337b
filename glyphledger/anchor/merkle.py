"""Merkle tree construction over ordered 256-bit leaf digests.

Odd levels pair their last node with a duplicate of itself. Roots and
proofs both come from the same MerkleTree levels, so the duplicate rule
cannot diverge between them.
"""
from dataclasses import dataclass
from typing import Sequence

from glyphledger.core.errors import ProofError

from .hash import hash_pair, to_digest, to_hex
from .verify import LEFT, RIGHT, ProofStep


@dataclass(frozen=True)
class MerkleTree:
    """Immutable tree. levels[0] are the leaves, levels[-1] is (root,)."""

    levels: tuple[tuple[bytes, ...], ...]

    @property
    def root(self) -> str:
        return to_hex(self.levels[-1][0])

    @property
    def leaf_count(self) -> int:
        return len(self.levels[0])

    @property
    def depth(self) -> int:
        return len(self.levels) - 1

    def proof(self, index: int) -> list[ProofStep]:
        """Sibling path from leaf index up to the root.

        Raises:
            ProofError: If index is out of range
        """
        if not isinstance(index, int) or isinstance(index, bool):
            raise ProofError(f"target index must be an int, got {index!r}")
        if not 0 <= index < self.leaf_count:
            raise ProofError(
                f"target index {index} out of range for {self.leaf_count} leaves"
            )

        path = []
        idx = index
        for level in self.levels[:-1]:
            if idx % 2 == 0:
                # Last node of an odd level is its own sibling
                sibling = level[idx + 1] if idx + 1 < len(level) else level[idx]
                path.append(ProofStep(to_hex(sibling), RIGHT))
            else:
                path.append(ProofStep(to_hex(level[idx - 1]), LEFT))
            idx //= 2
        return path


def build_tree(leaves: Sequence[str | bytes]) -> MerkleTree:
    """Build every level of the tree.

    Raises:
        ProofError: If leaves is empty or any leaf is malformed
    """
    if not leaves:
        raise ProofError("cannot build Merkle tree over empty leaf set")

    current = tuple(to_digest(leaf) for leaf in leaves)
    levels = [current]

    while len(current) > 1:
        nxt = []
        for i in range(0, len(current), 2):
            left = current[i]
            right = current[i + 1] if i + 1 < len(current) else left
            nxt.append(hash_pair(left, right))
        current = tuple(nxt)
        levels.append(current)

    return MerkleTree(levels=tuple(levels))


def build_root(leaves: Sequence[str | bytes]) -> str:
    """Merkle root as 64 lowercase hex chars. Single leaf: root == leaf."""
    return build_tree(leaves).root


def build_proof(leaves: Sequence[str | bytes], target_index: int) -> tuple[str, list[ProofStep]]:
    """Root plus the inclusion proof for leaves[target_index]."""
    tree = build_tree(leaves)
    return tree.root, tree.proof(target_index)
