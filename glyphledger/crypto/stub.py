"""Placeholder signature scheme bound to (content hash, tenant).

This is NOT real signing. It binds a receipt to its tenant so that moving
a receipt between tenants or editing its content is detectable, but anyone
can recompute it, so it gives no non-repudiation. A real backend plugs in
through the Signer protocol and must keep the same binding.
"""
import hmac
from typing import Protocol, runtime_checkable

import blake3

from glyphledger.core.constants import SIGNATURE_ALGORITHM_TAG


@runtime_checkable
class Signer(Protocol):
    """Signature capability used by stamping and verification."""

    algorithm: str

    def sign(self, content_hash: str, tenant_id: str) -> str:
        ...

    def verify(self, signature: str, content_hash: str, tenant_id: str) -> bool:
        ...


class StubSigner:
    """signature = BLAKE3(content_hash || tenant_id || algorithm tag), hex."""

    algorithm = "kyber-1024-stub"

    def __init__(self, tag: str = SIGNATURE_ALGORITHM_TAG):
        self.tag = tag

    def sign(self, content_hash: str, tenant_id: str) -> str:
        hasher = blake3.blake3()
        hasher.update(content_hash.encode("utf-8"))
        hasher.update(tenant_id.encode("utf-8"))
        hasher.update(self.tag.encode("utf-8"))
        return hasher.hexdigest()

    def verify(self, signature: str, content_hash: str, tenant_id: str) -> bool:
        if not all(isinstance(v, str) for v in (signature, content_hash, tenant_id)):
            return False
        expected = self.sign(content_hash, tenant_id)
        return hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8"))


def sign_receipt(receipt: dict, signer: Signer | None = None) -> str:
    """Signature over the receipt's stored content_hash and its tenant_id.

    Raises:
        ValueError: If content_hash is missing
    """
    digest = receipt.get("content_hash")
    if not isinstance(digest, str) or not digest:
        raise ValueError("receipt has no content_hash to sign")
    signer = signer or StubSigner()
    return signer.sign(digest, str(receipt.get("tenant_id", "")))


def verify_receipt_signature(receipt: dict, signer: Signer | None = None) -> bool:
    """Recompute the signature from the receipt's own fields and compare.

    Missing content_hash, tenant_id or signature verifies as False.
    """
    signer = signer or StubSigner()
    if not isinstance(receipt, dict):
        return False
    return signer.verify(
        receipt.get("signature"),
        receipt.get("content_hash"),
        receipt.get("tenant_id"),
    )
