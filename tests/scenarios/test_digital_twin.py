"""DIGITAL TWIN scenarios: baseline sync, fork, duress recovery, orbital replication, red loop.

Pass criteria:
- Worst divergence <= 5% classifies healthy, anything above is anomaly_detected
- Identical sequences anchor to identical roots; any differing observation changes the root
- Every emitted receipt validates and carries a verifiable content hash
"""
import pytest

from conftest import TENANT_ID
from glyphledger.anchor import build_proof, proves_inclusion
from glyphledger.core.receipt import hash_bytes, verify_content_hash
from glyphledger.core.schemas import validate_receipt
from glyphledger.crypto import verify_receipt_signature
from glyphledger.detect import AssetState, build_twin_receipt, compare_states, hash_state


def track(asset_id, rows):
    return [AssetState(asset_id, epoch, position, health) for epoch, (position, health) in enumerate(rows)]


def assert_receipt_basic(receipt, expected_type):
    assert receipt["receipt_type"] == expected_type, f"expected {expected_type}, got {receipt['receipt_type']}"
    assert receipt["tenant_id"] == TENANT_ID
    assert validate_receipt(receipt)
    assert verify_content_hash(receipt), "content_hash must match recomputed canonical hash"
    assert verify_receipt_signature(receipt), "signature must bind content_hash and tenant"
    assert len(receipt["root_real"]) == 64
    assert len(receipt["root_twin"]) == 64


class TestDigitalTwin:

    def test_baseline_twin_sync(self):
        """BASELINE: small drift stays within 5% and emits entanglement_prediction."""
        asset = "tesla-vin-5YJ3E1EA7KF317000"
        real = track(asset, [(0.0, 1.00), (12.5, 0.99), (25.0, 0.98)])
        twin = track(asset, [(0.0, 1.00), (12.6, 0.985), (24.9, 0.975)])

        report = compare_states(real, twin)

        assert report.worst <= 0.05, f"baseline twin divergence {report.worst:.4f} exceeds 5%"
        assert not report.roots_match, "differing observations anchor to different roots"
        receipt = build_twin_receipt(report, TENANT_ID, timestamp=1_763_000_000)
        assert_receipt_basic(receipt, "entanglement_prediction")

    def test_fork_anomaly(self):
        """FORK: a diverged twin exceeds 5% and changes the root."""
        asset = "tesla-vin-5YJ3E1EA7KF317000"
        real = track(asset, [(0.0, 1.00), (15.0, 0.99), (30.0, 0.98)])
        twin = list(real)
        twin[1] = AssetState(asset, 1, 18.0, 0.90)

        report = compare_states(real, twin)

        assert report.worst > 0.05, "fork anomaly must exceed 5% divergence"
        assert not report.roots_match, "fork anomaly must change Merkle root"
        receipt = build_twin_receipt(report, TENANT_ID, timestamp=1_763_000_000)
        assert_receipt_basic(receipt, "anomaly_detected")
        assert receipt["divergence_percent"] > 5.0

    def test_duress_recovery(self):
        """DURESS: fork is flagged, the recovered twin matches the real root exactly."""
        asset = "tesla-vin-5YJ3E1EA7KF317000"
        real = track(asset, [(0.0, 1.00), (20.0, 0.99), (40.0, 0.98)])
        forked = list(real)
        forked[2] = AssetState(asset, 2, 50.0, 0.88)
        recovered = list(real)

        fork_report = compare_states(real, forked, healthy_type="phase_transition")
        recovery_report = compare_states(real, recovered, healthy_type="phase_transition")

        assert fork_report.anomalous
        assert fork_report.real_root != fork_report.twin_root, "fork root must differ"
        assert recovery_report.worst == 0.0
        assert recovery_report.roots_match, "recovered root must match real"

        assert_receipt_basic(build_twin_receipt(fork_report, TENANT_ID, timestamp=1), "anomaly_detected")
        recovery_receipt = build_twin_receipt(recovery_report, TENANT_ID, timestamp=2)
        assert_receipt_basic(recovery_receipt, "phase_transition")
        assert recovery_receipt["divergence_percent"] <= 5.0

    def test_orbital_replication_with_proof(self):
        """ORBITAL: replicated pad telemetry stays healthy and its states prove into the root."""
        asset = "starship-pad-a"
        real = track(asset, [(1.0, 0.99)] * 4)
        twin = track(asset, [(1.0, 0.99), (1.0, 0.985), (1.0, 0.98), (1.0, 0.98)])

        report = compare_states(real, twin, healthy_type="orbital_telemetry")

        assert report.worst <= 0.05, f"orbital replication divergence {report.worst:.4f} must be <= 5%"

        hashes = [hash_state(s) for s in real]
        root, proof = build_proof(hashes, 0)
        assert root == report.real_root
        assert proof, "orbital replication proof path must not be empty"
        assert proves_inclusion(hashes[0], proof, report.real_root), "SPV-style proof must verify"

        receipt = build_twin_receipt(
            report, TENANT_ID,
            extra_fields={"satellite_id": "starlink-4021", "signal_strength_dbm": -92.5, "latency_ms": 38.2},
            timestamp=1_763_000_000,
        )
        assert_receipt_basic(receipt, "orbital_telemetry")

    def test_red_loop_closure(self):
        """RED LOOP: a week of fleet telemetry closes with worst <= 5% and average <= 3%."""
        asset = "tesla-fleet-memphis"
        real = track(asset, [
            (1000.0, 0.99), (1005.0, 0.99), (1010.0, 0.985), (1015.0, 0.985),
            (1020.0, 0.98), (1025.0, 0.98), (1030.0, 0.98),
        ])
        twin = track(asset, [
            (1000.0, 0.99), (1004.5, 0.989), (1010.5, 0.983), (1016.0, 0.982),
            (1021.0, 0.979), (1025.5, 0.978), (1030.0, 0.978),
        ])

        report = compare_states(real, twin, healthy_type="phase_transition")

        assert report.worst <= 0.05, f"red-loop worst divergence {report.worst:.4f} must be <= 5%"
        assert report.average <= 0.03, f"red-loop average divergence {report.average:.4f} must be <= 3%"
        assert report.per_observation[0] == 0.0

        red_loop_root = hash_bytes(f"red-loop-root:{report.real_root}")
        assert len(red_loop_root) == 64

        receipt = build_twin_receipt(
            report, TENANT_ID, extra_fields={"red_loop_root": red_loop_root}, timestamp=1_763_604_800
        )
        assert_receipt_basic(receipt, "phase_transition")
        assert receipt["average_divergence_percent"] == pytest.approx(report.average * 100.0)
