"""Ledger subpackage: stores, ingestion, anchoring and compaction."""
from .compact import CompactionOutcome, compact, compaction_receipt, reduction_percent, run_compaction
from .ingest import IngestResult, anchor_batch, check_integrity, ingest, prove_receipt
from .store import ColdStore, HotStore, JsonlColdStore, SqliteHotStore, file_lock

__all__ = [
    "HotStore",
    "ColdStore",
    "SqliteHotStore",
    "JsonlColdStore",
    "file_lock",
    "CompactionOutcome",
    "reduction_percent",
    "run_compaction",
    "compaction_receipt",
    "compact",
    "IngestResult",
    "check_integrity",
    "anchor_batch",
    "ingest",
    "prove_receipt",
]
