"""Compaction command: reclaim hot and cold stores behind the death criteria gate."""
import sys
import time
from dataclasses import replace

import click

from glyphledger.config import load_config
from glyphledger.core.errors import ConfigError, StoreError
from glyphledger.ledger import JsonlColdStore, SqliteHotStore
from glyphledger.ledger import compact as run_compact

from .output import EXIT_DEGRADED, EXIT_ERROR, EXIT_OK, error_box, success_box


@click.command()
@click.option('--config-dir', type=click.Path(file_okay=False), default=None,
              help='Directory holding slo.toml and ledger.*.toml (default: $GLYPH_CONFIG_DIR or ./config)')
@click.option('--tenant', default=None, help='Tenant ID (overrides config and $TENANT_ID)')
def compact(config_dir: str | None, tenant: str | None):
    """Compact the hot and cold ledgers and emit a compaction_complete receipt.

    Exit status is 1 when the health metric is below the death criteria
    threshold, 2 on configuration or store failure.
    """
    t0 = time.perf_counter()
    try:
        config = load_config(config_dir)
    except ConfigError as e:
        error_box("Compact: CONFIG ERROR", str(e), "glyph compact --config-dir <dir>")
        sys.exit(EXIT_ERROR)

    if tenant:
        config = replace(config, tenant_id=tenant)

    hot = SqliteHotStore(config.hot_store_path, retention_seconds=config.hot_retention_seconds)
    cold = JsonlColdStore(config.cold_store_path)
    try:
        receipt, outcome = run_compact(hot, cold, config)
    except StoreError as e:
        error_box("Compact: FAILED", str(e))
        sys.exit(EXIT_ERROR)
    finally:
        hot.close()

    elapsed_ms = int((time.perf_counter() - t0) * 1000)
    rows = [
        ("Receipt", receipt["receipt_id"]),
        ("Rows", f"{outcome.rows_before} -> {outcome.rows_after}"),
        ("Cold bytes", f"{outcome.live_bytes_before} -> {outcome.live_bytes_after}"),
        ("Reduction", f"{receipt['reduction_percent']}%"),
        ("PCE", f"{receipt['pce_transitivity']}"),
        ("Duration", f"{elapsed_ms}ms"),
    ]
    for store, message in outcome.store_errors.items():
        rows.append((f"{store} error", message))

    if outcome.death_triggered:
        success_box("Compact: DEGRADED", rows)
        error_box(
            "Compact: DEATH CRITERIA",
            f"pce_transitivity {outcome.pce_transitivity:.4f} < {outcome.death_threshold:.2f}",
        )
        sys.exit(EXIT_DEGRADED)

    success_box("Compact: SUCCESS", rows)
    sys.exit(EXIT_OK)
