"""Shared fixtures: golden receipt templates, stamped chains, stores and config."""
import json
from pathlib import Path

import pytest

from glyphledger.config import GlyphConfig
from glyphledger.core.errors import StoreError
from glyphledger.core.receipt import stamp_receipt
from glyphledger.ledger.store import ColdStore, HotStore

FIXTURES = Path(__file__).parent / "fixtures"
TENANT_ID = "xai-memphis-01"
BASE_TS = 1_763_000_000


def load_fixture(name: str) -> dict:
    """Load a golden receipt template by receipt_type."""
    with open(FIXTURES / f"{name}.json") as f:
        return json.load(f)


def stamped(name: str, **overrides) -> dict:
    """Golden template with overrides applied, freshly stamped."""
    receipt = load_fixture(name)
    receipt.update(overrides)
    return stamp_receipt(receipt)


class FakeHotStore(HotStore):
    """In-memory hot store: reclaim drops rows down to keep."""

    name = "fake-hot"

    def __init__(self, rows: int = 0, keep: int | None = None, fail_on: str | None = None):
        self.rows = rows
        self.keep = rows if keep is None else keep
        self.fail_on = fail_on
        self.calls = []

    def row_count(self) -> int:
        self.calls.append("row_count")
        if self.fail_on == "row_count":
            raise StoreError(self.name, "row count failed")
        return self.rows

    def reclaim(self) -> None:
        self.calls.append("reclaim")
        if self.fail_on == "reclaim":
            raise StoreError(self.name, "reclaim failed")
        self.rows = self.keep


class FakeColdStore(ColdStore):
    """In-memory cold store with scripted live-byte estimates."""

    name = "fake-cold"

    def __init__(self, before: int | None = None, after: int | None = None, fail: bool = False):
        self.estimates = [before, after]
        self.fail = fail
        self.compacted = False

    def estimate_live_bytes(self) -> int | None:
        if self.fail:
            raise StoreError(self.name, "archive unavailable")
        return self.estimates[1] if self.compacted else self.estimates[0]

    def compact_all(self) -> None:
        self.compacted = True


@pytest.fixture
def config() -> GlyphConfig:
    """Default configuration for the test tenant."""
    return GlyphConfig(tenant_id=TENANT_ID)


@pytest.fixture
def chain() -> list[dict]:
    """Ten stamped receipts: 6 bore, then orbital, zk, entanglement, orbital."""
    receipts = [
        stamped("bore_progress", timestamp=BASE_TS + i, meters_advanced=10.0 + i)
        for i in range(6)
    ]
    receipts.append(stamped("orbital_telemetry", timestamp=BASE_TS + 100))
    receipts.append(stamped("zk_anomaly_proof", timestamp=BASE_TS + 200))
    receipts.append(stamped("entanglement_prediction", timestamp=BASE_TS + 300))
    receipts.append(stamped("orbital_telemetry", timestamp=BASE_TS + 400, latency_ms=41.0))
    return receipts


@pytest.fixture
def config_dir(tmp_path) -> Path:
    """A complete config directory with stores under tmp_path/data."""
    cfg = tmp_path / "config"
    cfg.mkdir()
    (cfg / "slo.toml").write_text(
        "[death_criteria]\npce_transitivity_min = 0.90\n\n[twin]\nmax_divergence = 0.05\n"
    )
    (cfg / "ledger.sqlite.toml").write_text('path = "data/ledger.db"\n')
    (cfg / "ledger.archive.toml").write_text('path = "data/archive.jsonl"\n')
    return cfg


@pytest.fixture
def clean_env(monkeypatch):
    """Remove environment overrides so tests see file/default config."""
    for var in ("TENANT_ID", "PCE_TRANSITIVITY", "GLYPH_CONFIG_DIR"):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
