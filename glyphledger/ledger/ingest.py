"""Receipt ingestion: validate, verify, persist and anchor a batch.

Invalid receipts are rejected with a reason and never reach the Merkle
batch; the rest of the batch is unaffected.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable

from glyphledger.anchor import ProofStep, build_proof, build_root
from glyphledger.config import GlyphConfig
from glyphledger.core.constants import ANCHOR_EMITTER
from glyphledger.core.errors import ProofError
from glyphledger.core.receipt import build_receipt, verify_content_hash
from glyphledger.core.schemas import check_receipt
from glyphledger.crypto import Signer, verify_receipt_signature

from .store import JsonlColdStore, SqliteHotStore

logger = logging.getLogger("glyphledger.ledger")


@dataclass
class IngestResult:
    accepted: list[dict] = field(default_factory=list)
    rejected: list[tuple[dict, str]] = field(default_factory=list)
    merkle_root: str | None = None
    anchor_receipt: dict | None = None

    @property
    def leaves(self) -> list[str]:
        return [r["content_hash"] for r in self.accepted]


def check_integrity(
    receipt: dict,
    config: GlyphConfig,
    signer: Signer | None = None,
) -> tuple[bool, str | None]:
    """Schema check, then content hash, then signature."""
    ok, reason = check_receipt(receipt, config.producers)
    if not ok:
        return False, reason
    if not verify_content_hash(receipt):
        return False, "content_hash does not match canonical form"
    if not verify_receipt_signature(receipt, signer):
        return False, "signature does not match content_hash and tenant_id"
    return True, None


def anchor_batch(
    receipts: list[dict],
    config: GlyphConfig,
    timestamp: int | None = None,
    signer: Signer | None = None,
) -> dict:
    """Merkle root over the receipts' content hashes, recorded in an anchor receipt.

    Raises:
        ProofError: If receipts is empty
    """
    root = build_root([r["content_hash"] for r in receipts])
    return build_receipt(
        "phase_transition",
        {
            "merkle_root": root,
            "batch_size": len(receipts),
            "first_receipt_id": receipts[0]["receipt_id"],
            "last_receipt_id": receipts[-1]["receipt_id"],
        },
        config.tenant_id,
        ANCHOR_EMITTER,
        timestamp=timestamp,
        signer=signer,
    )


def ingest(
    receipts: Iterable[dict],
    config: GlyphConfig,
    hot: SqliteHotStore | None = None,
    cold: JsonlColdStore | None = None,
    signer: Signer | None = None,
    timestamp: int | None = None,
) -> IngestResult:
    """Validate a batch, persist accepted receipts and anchor them.

    Accepted receipts are appended to hot and cold stores when given. The
    anchor receipt is only built when at least one receipt was accepted.
    """
    result = IngestResult()
    for receipt in receipts:
        ok, reason = check_integrity(receipt, config, signer)
        if not ok:
            logger.info("rejected receipt %s: %s", receipt.get("receipt_id") if isinstance(receipt, dict) else None, reason)
            result.rejected.append((receipt, reason))
            continue
        result.accepted.append(receipt)

    for receipt in result.accepted:
        if hot is not None:
            hot.append(receipt)
        if cold is not None:
            cold.append(receipt)

    if result.accepted:
        result.anchor_receipt = anchor_batch(result.accepted, config, timestamp=timestamp, signer=signer)
        result.merkle_root = result.anchor_receipt["merkle_root"]

    logger.info(
        "ingested %d receipts, rejected %d, root %s",
        len(result.accepted), len(result.rejected), result.merkle_root,
    )
    return result


def prove_receipt(receipts: list[dict], receipt_id: str) -> tuple[str, list[ProofStep]]:
    """Root and inclusion proof for the receipt with receipt_id.

    Raises:
        ProofError: If receipt_id is not in the batch
    """
    for index, receipt in enumerate(receipts):
        if receipt.get("receipt_id") == receipt_id:
            return build_proof([r["content_hash"] for r in receipts], index)
    raise ProofError(f"receipt not in batch: {receipt_id}")
