"""Detect subpackage: digital twin divergence and ZK proof shape checks."""
from .twin import (
    AssetState,
    DivergenceReport,
    build_twin_receipt,
    compare_states,
    hash_state,
    relative_divergence,
    state_root,
)
from .zk import verify_zk_stub

__all__ = [
    "AssetState",
    "DivergenceReport",
    "relative_divergence",
    "hash_state",
    "state_root",
    "compare_states",
    "build_twin_receipt",
    "verify_zk_stub",
]
