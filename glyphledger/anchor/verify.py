"""Inclusion proof folding (SPV-style verification)."""
from dataclasses import dataclass
from typing import Iterable

from glyphledger.core.errors import ProofError

from .hash import hash_pair, to_digest, to_hex

LEFT = "left"
RIGHT = "right"


@dataclass(frozen=True)
class ProofStep:
    """One sibling on the path; side is where the sibling sits relative to the accumulator."""

    sibling: str
    side: str

    def __post_init__(self):
        if self.side not in (LEFT, RIGHT):
            raise ProofError(f"proof side must be 'left' or 'right', got {self.side!r}")

    def to_dict(self) -> dict:
        return {"hash": self.sibling, "position": self.side}

    @classmethod
    def from_dict(cls, data: dict) -> "ProofStep":
        try:
            return cls(sibling=data["hash"], side=data["position"])
        except (KeyError, TypeError):
            raise ProofError(f"malformed proof step: {data!r}") from None


def verify_proof(leaf: str | bytes, proof: Iterable[ProofStep]) -> str:
    """Fold the proof from leaf to root and return the recomputed root.

    Equality with an independently built root certifies inclusion.
    """
    acc = to_digest(leaf)
    for step in proof:
        sibling = to_digest(step.sibling)
        if step.side == LEFT:
            acc = hash_pair(sibling, acc)
        else:
            acc = hash_pair(acc, sibling)
    return to_hex(acc)


def proves_inclusion(leaf: str | bytes, proof: Iterable[ProofStep], root: str) -> bool:
    """True if folding proof from leaf reproduces root."""
    return verify_proof(leaf, proof) == to_hex(to_digest(root))


def proof_to_json(proof: Iterable[ProofStep]) -> list[dict]:
    return [step.to_dict() for step in proof]


def proof_from_json(data: list) -> list[ProofStep]:
    if not isinstance(data, list):
        raise ProofError("proof must be a JSON array")
    return [ProofStep.from_dict(step) for step in data]
