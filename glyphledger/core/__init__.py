"""Core subpackage: canonical receipts, content hashing and schema validation.

Exports all from receipt.py, schemas.py and errors.py.
"""
from .errors import ConfigError, GlyphError, ProofError, StoreError, ValidationError
from .receipt import (
    build_receipt,
    canonicalize,
    content_hash,
    emit_receipt,
    hash_bytes,
    make_receipt_id,
    print_receipt,
    stamp_receipt,
    verify_content_hash,
)
from .schemas import (
    RECEIPT_SCHEMAS,
    REQUIRED_FIELDS,
    check_receipt,
    partition_receipts,
    validate_receipt,
)

__all__ = [
    "canonicalize",
    "content_hash",
    "hash_bytes",
    "make_receipt_id",
    "stamp_receipt",
    "build_receipt",
    "emit_receipt",
    "print_receipt",
    "verify_content_hash",
    "RECEIPT_SCHEMAS",
    "REQUIRED_FIELDS",
    "validate_receipt",
    "check_receipt",
    "partition_receipts",
    "GlyphError",
    "ConfigError",
    "StoreError",
    "ValidationError",
    "ProofError",
]
