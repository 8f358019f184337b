"""Core receipt primitives shared by every glyphledger module.

Functions:
    canonicalize: Deterministic bytes for a receipt, volatile fields removed
    content_hash: BLAKE3 digest of the canonical form (64 lowercase hex)
    make_receipt_id: receipt-<32 hex> identifier from a seed
    stamp_receipt: Attach content_hash, signature and receipt_id
    build_receipt: Assemble base fields and stamp
    emit_receipt: build_receipt and print JSON to stdout
    print_receipt: Print an already stamped receipt
    verify_content_hash: Recompute and compare the stored content_hash
"""
import json
import time

import blake3

from glyphledger.crypto.stub import Signer, StubSigner, sign_receipt

from .constants import (
    HASH_HEX_LEN,
    RECEIPT_ID_HEX_LEN,
    RECEIPT_ID_PREFIX,
    RECEIPT_VERSION,
    VOLATILE_FIELDS,
)

_DEFAULT_SIGNER = StubSigner()


def canonicalize(receipt: dict) -> bytes:
    """Deterministic canonical bytes for a receipt-shaped value.

    Top-level content_hash, signature and receipt_id are dropped, object
    keys are sorted at every depth and array order is preserved. Two
    structurally equal receipts always produce identical bytes regardless
    of key order or volatile field values.

    Raises:
        TypeError: If receipt is not a dict
        ValueError: If receipt contains NaN or infinity
    """
    if not isinstance(receipt, dict):
        raise TypeError(f"receipt must be a dict, got {type(receipt).__name__}")

    body = {k: v for k, v in receipt.items() if k not in VOLATILE_FIELDS}
    text = json.dumps(
        body,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def hash_bytes(data: bytes | str) -> str:
    """BLAKE3 hex digest of bytes or a UTF-8 string."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return blake3.blake3(data).hexdigest()


def content_hash(receipt: dict) -> str:
    """256-bit content hash of the canonical form, 64 lowercase hex chars."""
    return hash_bytes(canonicalize(receipt))


def make_receipt_id(seed: bytes | str) -> str:
    """Derive a receipt id from an arbitrary seed."""
    return RECEIPT_ID_PREFIX + hash_bytes(seed)[:RECEIPT_ID_HEX_LEN]


def stamp_receipt(
    receipt: dict,
    signer: Signer | None = None,
    receipt_id: str | None = None,
) -> dict:
    """Return a stamped copy of receipt.

    The input is never mutated. Any field change after stamping requires
    a full re-stamp; volatile fields already present are overwritten.

    Args:
        receipt: Receipt fields including tenant_id
        signer: Signature backend (default: StubSigner)
        receipt_id: Explicit id; derived from the content hash when None

    Returns:
        New dict with content_hash, signature and receipt_id set
    """
    signer = signer or _DEFAULT_SIGNER
    digest = content_hash(receipt)

    stamped = dict(receipt)
    stamped["content_hash"] = digest
    stamped["signature"] = sign_receipt(stamped, signer)
    stamped["receipt_id"] = receipt_id or RECEIPT_ID_PREFIX + digest[:RECEIPT_ID_HEX_LEN]
    return stamped


def build_receipt(
    receipt_type: str,
    data: dict,
    tenant_id: str,
    emitted_by: str,
    timestamp: int | None = None,
    signer: Signer | None = None,
    receipt_id: str | None = None,
) -> dict:
    """Assemble a receipt with the standard base fields and stamp it.

    Base fields win over keys of the same name in data.
    """
    if timestamp is None:
        timestamp = int(time.time())

    receipt = {
        **data,
        "version": RECEIPT_VERSION,
        "timestamp": int(timestamp),
        "tenant_id": tenant_id,
        "receipt_type": receipt_type,
        "emitted_by": emitted_by,
    }
    return stamp_receipt(receipt, signer=signer, receipt_id=receipt_id)


def emit_receipt(
    receipt_type: str,
    data: dict,
    tenant_id: str,
    emitted_by: str,
    timestamp: int | None = None,
    signer: Signer | None = None,
    receipt_id: str | None = None,
) -> dict:
    """Build a receipt and print it to stdout as one JSON line.

    Returns:
        The stamped receipt dict
    """
    receipt = build_receipt(
        receipt_type,
        data,
        tenant_id,
        emitted_by,
        timestamp=timestamp,
        signer=signer,
        receipt_id=receipt_id,
    )
    print_receipt(receipt)
    return receipt


def print_receipt(receipt: dict) -> None:
    """Write one receipt to stdout as a single sorted-key JSON line."""
    print(json.dumps(receipt, sort_keys=True), flush=True)


def verify_content_hash(receipt: dict) -> bool:
    """True if the stored content_hash matches the recomputed one."""
    stored = receipt.get("content_hash") if isinstance(receipt, dict) else None
    if not isinstance(stored, str) or len(stored) != HASH_HEX_LEN:
        return False
    try:
        return content_hash(receipt) == stored
    except (TypeError, ValueError):
        return False
