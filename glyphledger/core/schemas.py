"""Receipt schema definitions and validation.

Constants:
    REQUIRED_FIELDS: Fields required in all receipts, in check order
    RECEIPT_SCHEMAS: Type-specific field rules keyed by receipt_type

Functions:
    validate_receipt: Raise ValidationError on the first failing check
    check_receipt: Non-raising (ok, reason) form
    partition_receipts: Split a batch into accepted and rejected
"""
import re
from numbers import Real
from typing import Callable, Iterable

from .constants import (
    DEFAULT_PRODUCERS,
    MIN_CORRELATION_SCORE,
    MIN_PREDICTED_NEGATION_MS,
    MIN_SIGNATURE_HEX_LEN,
    RECEIPT_TYPES,
    RECEIPT_VERSION,
)
from .errors import ValidationError

REQUIRED_FIELDS = [
    "version",
    "receipt_id",
    "timestamp",
    "tenant_id",
    "receipt_type",
    "emitted_by",
    "content_hash",
    "signature",
]

_RECEIPT_ID_RE = re.compile(r"^receipt-[0-9a-f]{32}$")
_HASH_RE = re.compile(r"^[0-9a-f]{64}$")
_HEX_RE = re.compile(r"^[0-9a-f]+$")


def _is_number(v) -> bool:
    return isinstance(v, Real) and not isinstance(v, bool)


def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_string(v) -> bool:
    return isinstance(v, str)


def _is_nonempty_list(v) -> bool:
    return isinstance(v, list) and len(v) > 0


def _at_least(bound: float) -> Callable:
    def check(v) -> bool:
        return _is_number(v) and v >= bound
    return check


# Each rule: (dotted field path, predicate, description used in the reason)
RECEIPT_SCHEMAS = {
    "bore_progress": [
        ("meters_advanced", _is_number, "a number"),
        ("cutter_head_rpm", _is_int, "an integer"),
    ],
    "orbital_telemetry": [
        ("satellite_id", _is_string, "a string"),
        ("signal_strength_dbm", _is_number, "a number"),
        ("latency_ms", _is_number, "a number"),
    ],
    "zk_anomaly_proof": [
        ("zk_proof.pi_a", _is_nonempty_list, "a non-empty array"),
        ("zk_proof.pi_b", _is_nonempty_list, "a non-empty array"),
        ("zk_proof.pi_c", _is_nonempty_list, "a non-empty array"),
        ("public_inputs", _is_nonempty_list, "a non-empty array"),
    ],
    "entanglement_prediction": [
        ("correlation_score", _at_least(MIN_CORRELATION_SCORE),
         f"a number >= {MIN_CORRELATION_SCORE}"),
        ("predicted_negation_ms", _at_least(MIN_PREDICTED_NEGATION_MS),
         f"a number >= {MIN_PREDICTED_NEGATION_MS}"),
    ],
    "anomaly_detected": [],
    "phase_transition": [],
    "swarm_vote": [],
    "compaction_complete": [],
    "voice_page_sent": [],
}

_MISSING = object()


def _lookup(receipt: dict, path: str):
    value = receipt
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def validate_receipt(receipt: dict, producers: Iterable[str] | None = None) -> bool:
    """Validate receipt base fields, then its type-specific fields.

    Checks run in a fixed order and the first failure is reported.

    Args:
        receipt: Receipt dict to validate
        producers: Allowed emitted_by names (default: DEFAULT_PRODUCERS)

    Returns:
        True if valid

    Raises:
        ValidationError: With the reason of the first failing check
    """
    if not isinstance(receipt, dict):
        raise ValidationError("receipt is not an object")

    allowed = tuple(producers) if producers is not None else DEFAULT_PRODUCERS

    def require(field: str):
        if field not in receipt:
            raise ValidationError(f"missing {field}")
        return receipt[field]

    version = require("version")
    if version != RECEIPT_VERSION:
        raise ValidationError(f"unexpected version: {version!r}")

    receipt_id = require("receipt_id")
    if not isinstance(receipt_id, str) or not _RECEIPT_ID_RE.match(receipt_id):
        raise ValidationError(f"bad receipt_id format: {receipt_id!r}")

    timestamp = require("timestamp")
    if not _is_int(timestamp) or timestamp < 0:
        raise ValidationError(f"invalid timestamp: {timestamp!r}")

    tenant_id = require("tenant_id")
    if not isinstance(tenant_id, str) or not tenant_id:
        raise ValidationError("tenant_id must be a non-empty string")

    receipt_type = require("receipt_type")
    if receipt_type not in RECEIPT_TYPES:
        raise ValidationError(f"unknown receipt_type: {receipt_type!r}")

    emitted_by = require("emitted_by")
    if emitted_by not in allowed:
        raise ValidationError(f"unknown emitted_by: {emitted_by!r}")

    digest = require("content_hash")
    if not isinstance(digest, str) or not _HASH_RE.match(digest):
        raise ValidationError("content_hash must be 64 lowercase hex chars")

    signature = require("signature")
    if (not isinstance(signature, str)
            or len(signature) < MIN_SIGNATURE_HEX_LEN
            or not _HEX_RE.match(signature)):
        raise ValidationError(
            f"signature must be at least {MIN_SIGNATURE_HEX_LEN} lowercase hex chars"
        )

    for path, predicate, description in RECEIPT_SCHEMAS[receipt_type]:
        value = _lookup(receipt, path)
        if value is _MISSING:
            raise ValidationError(f"{receipt_type}: missing {path}")
        if not predicate(value):
            raise ValidationError(f"{receipt_type}: {path} must be {description}")

    return True


def check_receipt(receipt: dict, producers: Iterable[str] | None = None) -> tuple[bool, str | None]:
    """Validate without raising. Returns (True, None) or (False, reason)."""
    try:
        validate_receipt(receipt, producers)
    except ValidationError as e:
        return False, e.reason
    return True, None


def partition_receipts(
    receipts: Iterable[dict],
    producers: Iterable[str] | None = None,
) -> tuple[list[dict], list[tuple[dict, str]]]:
    """Split receipts into accepted and (receipt, reason) rejected lists.

    A rejected receipt never affects the others; input order is kept.
    """
    allowed = tuple(producers) if producers is not None else None
    accepted, rejected = [], []
    for receipt in receipts:
        ok, reason = check_receipt(receipt, allowed)
        if ok:
            accepted.append(receipt)
        else:
            rejected.append((receipt, reason))
    return accepted, rejected
