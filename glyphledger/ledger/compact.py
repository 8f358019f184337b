"""Ledger compaction gated on the death criteria.

A run compacts the hot store and the cold store independently, combines
their reductions, reads the health metric from the run's configuration,
and always emits a compaction_complete receipt. A store that fails
contributes unknown (None) fields; if both fail the run aborts.
"""
import logging
import time
from dataclasses import dataclass, field

from glyphledger.config import GlyphConfig
from glyphledger.core.constants import (
    COMPACTION_EMITTER,
    DEATH_PCE_THRESHOLD,
    DEFAULT_PCE_TRANSITIVITY,
)
from glyphledger.core.errors import StoreError
from glyphledger.core.receipt import build_receipt, make_receipt_id, print_receipt
from glyphledger.crypto import Signer

from .store import ColdStore, HotStore

logger = logging.getLogger("glyphledger.ledger")


@dataclass
class CompactionOutcome:
    """Before/after metrics of one compaction run."""

    rows_before: int | None = None
    rows_after: int | None = None
    live_bytes_before: int | None = None
    live_bytes_after: int | None = None
    pce_transitivity: float = DEFAULT_PCE_TRANSITIVITY
    death_threshold: float = DEATH_PCE_THRESHOLD
    store_errors: dict = field(default_factory=dict)

    @property
    def hot_reduction_percent(self) -> float:
        return reduction_percent(self.rows_before, self.rows_after)

    @property
    def cold_reduction_percent(self) -> float:
        return reduction_percent(self.live_bytes_before, self.live_bytes_after)

    @property
    def reduction_percent(self) -> float:
        return max(self.hot_reduction_percent, self.cold_reduction_percent)

    @property
    def death_triggered(self) -> bool:
        return self.pce_transitivity < self.death_threshold

    def to_receipt_data(self) -> dict:
        data = {
            "input_row_count": self.rows_before,
            "output_row_count": self.rows_after,
            "reduction_percent": round(self.reduction_percent, 2),
            "cold_live_bytes_before": self.live_bytes_before,
            "cold_live_bytes_after": self.live_bytes_after,
            "pce_transitivity": round(self.pce_transitivity, 4),
            "death_triggered": self.death_triggered,
        }
        if self.store_errors:
            data["store_errors"] = dict(self.store_errors)
        return data


def reduction_percent(before: int | None, after: int | None) -> float:
    """Fractional reduction as a percentage.

    0 when either side is unknown or nothing existed before; growth is
    clamped to 0.
    """
    if before is None or after is None or before <= 0:
        return 0.0
    return max((before - after) / before * 100.0, 0.0)


def _compact_hot(store: HotStore) -> tuple[int, int]:
    with store.exclusive():
        before = store.row_count()
        store.reclaim()
        after = store.row_count()
    logger.info("hot store %s: %d rows -> %d rows", store.name, before, after)
    return before, after


def _compact_cold(store: ColdStore) -> tuple[int | None, int | None]:
    with store.exclusive():
        before = store.estimate_live_bytes()
        store.compact_all()
        after = store.estimate_live_bytes()
    logger.info("cold store %s: %s bytes -> %s bytes", store.name, before, after)
    return before, after


def run_compaction(hot: HotStore, cold: ColdStore, config: GlyphConfig) -> CompactionOutcome:
    """Compact both stores and compute the outcome. No receipt is emitted.

    Raises:
        StoreError: If both stores fail
    """
    outcome = CompactionOutcome(
        pce_transitivity=config.pce_transitivity,
        death_threshold=config.death_threshold,
    )

    try:
        outcome.rows_before, outcome.rows_after = _compact_hot(hot)
    except StoreError as e:
        logger.error("hot store compaction failed: %s", e)
        outcome.store_errors["hot"] = e.message

    try:
        outcome.live_bytes_before, outcome.live_bytes_after = _compact_cold(cold)
    except StoreError as e:
        logger.error("cold store compaction failed: %s", e)
        outcome.store_errors["cold"] = e.message

    if "hot" in outcome.store_errors and "cold" in outcome.store_errors:
        raise StoreError(
            "compaction",
            f"both stores failed: hot: {outcome.store_errors['hot']}; "
            f"cold: {outcome.store_errors['cold']}",
        )

    if outcome.death_triggered:
        logger.warning(
            "death criteria triggered: pce_transitivity %.4f < %.2f",
            outcome.pce_transitivity, outcome.death_threshold,
        )
    return outcome


def compaction_receipt(
    outcome: CompactionOutcome,
    config: GlyphConfig,
    timestamp: int | None = None,
    signer: Signer | None = None,
) -> dict:
    """Build the stamped compaction_complete receipt for an outcome."""
    now = int(time.time()) if timestamp is None else int(timestamp)
    receipt_id = make_receipt_id(f"compaction-{now}-{outcome.rows_before}-{outcome.rows_after}")
    return build_receipt(
        "compaction_complete",
        outcome.to_receipt_data(),
        config.tenant_id,
        COMPACTION_EMITTER,
        timestamp=now,
        signer=signer,
        receipt_id=receipt_id,
    )


def compact(
    hot: HotStore,
    cold: ColdStore,
    config: GlyphConfig,
    timestamp: int | None = None,
    signer: Signer | None = None,
) -> tuple[dict, CompactionOutcome]:
    """Run compaction and emit the compaction_complete receipt to stdout.

    The receipt is emitted whether or not the death criteria triggered;
    callers signal degraded health through outcome.death_triggered.

    Returns:
        (receipt, outcome)
    """
    outcome = run_compaction(hot, cold, config)
    receipt = compaction_receipt(outcome, config, timestamp=timestamp, signer=signer)
    print_receipt(receipt)
    return receipt, outcome
