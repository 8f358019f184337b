"""
glyphledger - tamper-evident ledger of hashed, signed receipts.

Every receipt is canonicalized and content-hashed, signed, validated,
batched into a Merkle tree for inclusion proofs, and periodically compacted
behind a health gate.
"""

__version__ = "1.0.0"

from glyphledger.core import (
    ConfigError,
    GlyphError,
    ProofError,
    StoreError,
    ValidationError,
    build_receipt,
    canonicalize,
    content_hash,
    emit_receipt,
    stamp_receipt,
    validate_receipt,
    verify_content_hash,
)
from glyphledger.anchor import build_proof, build_root, proves_inclusion, verify_proof
from glyphledger.crypto import Signer, StubSigner, verify_receipt_signature

__all__ = [
    "__version__",
    # Core
    "canonicalize",
    "content_hash",
    "stamp_receipt",
    "build_receipt",
    "emit_receipt",
    "verify_content_hash",
    "validate_receipt",
    # Anchor
    "build_root",
    "build_proof",
    "verify_proof",
    "proves_inclusion",
    # Signatures
    "Signer",
    "StubSigner",
    "verify_receipt_signature",
    # Errors
    "GlyphError",
    "ConfigError",
    "StoreError",
    "ValidationError",
    "ProofError",
]
