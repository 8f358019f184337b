"""Digest utilities for Merkle construction.

Leaves and roots travel as 64-char hex strings; hashing always happens
over the raw 32-byte digests.
"""
import blake3

from glyphledger.core.errors import ProofError

DIGEST_SIZE = 32


def to_digest(leaf: str | bytes) -> bytes:
    """Convert a hex string or raw bytes into a 32-byte digest.

    Raises:
        ProofError: If leaf is not 32 bytes / 64 hex chars
    """
    if isinstance(leaf, (bytes, bytearray)):
        raw = bytes(leaf)
    elif isinstance(leaf, str):
        try:
            raw = bytes.fromhex(leaf)
        except ValueError:
            raise ProofError(f"malformed hex digest: {leaf!r}") from None
    else:
        raise ProofError(f"digest must be hex str or bytes, got {type(leaf).__name__}")

    if len(raw) != DIGEST_SIZE:
        raise ProofError(f"expected {DIGEST_SIZE}-byte digest, got {len(raw)}")
    return raw


def to_hex(digest: bytes) -> str:
    return digest.hex()


def hash_pair(left: bytes, right: bytes) -> bytes:
    """Parent digest = BLAKE3(left || right)."""
    return blake3.blake3(left + right).digest()
