"""Unit tests for detect.twin and detect.zk.

Functions tested: relative_divergence, hash_state, state_root,
compare_states, build_twin_receipt, verify_zk_stub
SLO: worst divergence <= 0.05 is healthy, anything above is anomaly_detected
"""
import logging

import blake3
import pytest

from conftest import TENANT_ID, stamped
from glyphledger.core.receipt import verify_content_hash
from glyphledger.core.schemas import validate_receipt
from glyphledger.detect import (
    AssetState,
    build_twin_receipt,
    compare_states,
    hash_state,
    relative_divergence,
    state_root,
    verify_zk_stub,
)


def states(positions, health=1.0, asset_id="tbm-01", **extra):
    return [
        AssetState(asset_id=asset_id, epoch=i, position=p, health=health, extra=dict(extra))
        for i, p in enumerate(positions)
    ]


class TestRelativeDivergence:

    @pytest.mark.parametrize("a,b,expected", [
        (0.0, 0.0, 0.0),
        (0.0, 3.0, 1.0),
        (10.0, 10.0, 0.0),
        (10.0, 10.5, 0.05),
        (10.0, 9.0, 0.1),
        (-10.0, -11.0, 0.1),
        (1.0, 5.0, 1.0),
    ])
    def test_values(self, a, b, expected):
        assert relative_divergence(a, b) == pytest.approx(expected)

    def test_capped_at_one(self):
        assert relative_divergence(1.0, 1e9) == 1.0


class TestStateHash:

    def test_hash_format(self):
        state = AssetState("tbm-01", 3, 10.0, 0.5)
        expected = blake3.blake3(
            b"asset_id=tbm-01|epoch=3|position=10.000000|health=0.500000"
        ).hexdigest()

        assert hash_state(state) == expected

    def test_extra_measurements_sorted(self):
        state = AssetState("tbm-01", 0, 1.0, 1.0, extra={"torque": 2.0, "rpm": 3.0})
        expected = blake3.blake3(
            b"asset_id=tbm-01|epoch=0|position=1.000000|health=1.000000|rpm=3.000000|torque=2.000000"
        ).hexdigest()

        assert hash_state(state) == expected

    def test_fixed_precision(self):
        """Differences below six decimals do not change the hash."""
        assert hash_state(AssetState("a", 0, 1.0, 1.0)) == hash_state(AssetState("a", 0, 1.0000001, 1.0))

    def test_identical_sequences_same_root(self):
        assert state_root(states([1.0, 2.0, 3.0])) == state_root(states([1.0, 2.0, 3.0]))

    def test_different_sequences_different_root(self):
        assert state_root(states([1.0, 2.0, 3.0])) != state_root(states([1.0, 2.0, 3.5]))

    def test_from_dict(self):
        state = AssetState.from_dict(
            {"asset_id": "sat-7", "epoch": 4, "position": 1, "health": 0.9, "latency_ms": 38}
        )

        assert state == AssetState("sat-7", 4, 1.0, 0.9, extra={"latency_ms": 38.0})

    def test_from_dict_non_numeric_extra(self):
        """Unknown keys are measurements; a text label is rejected."""
        with pytest.raises(ValueError):
            AssetState.from_dict(
                {"asset_id": "tbm-01", "epoch": 0, "position": 1.0, "health": 1.0, "label": "x"}
            )

    def test_from_dict_missing_key(self):
        with pytest.raises(KeyError):
            AssetState.from_dict({"asset_id": "tbm-01", "epoch": 0, "position": 1.0})


class TestCompareStates:
    """Classification of paired sequences."""

    def test_identical_is_healthy(self):
        report = compare_states(states([10.0, 11.0]), states([10.0, 11.0]))

        assert report.receipt_type == "entanglement_prediction"
        assert report.worst == 0.0
        assert report.roots_match

    def test_boundary_five_percent_is_healthy(self):
        """d = 0.05 exactly is within threshold."""
        report = compare_states(states([10.0]), states([10.5]))

        assert report.worst == pytest.approx(0.05)
        assert report.receipt_type == "entanglement_prediction"
        assert not report.roots_match

    def test_above_threshold_is_anomaly(self):
        report = compare_states(states([10.0]), states([10.6]))

        assert report.receipt_type == "anomaly_detected"
        assert report.anomalous

    def test_worst_observation_decides(self):
        report = compare_states(states([10.0, 10.0, 10.0]), states([10.0, 10.0, 12.0]))

        assert report.worst == pytest.approx(0.2)
        assert report.average == pytest.approx(0.2 / 3)
        assert report.anomalous

    def test_health_measurement_counts(self):
        report = compare_states(states([10.0], health=1.0), states([10.0], health=0.5))

        assert report.worst == pytest.approx(0.5)
        assert report.anomalous

    def test_zero_real_nonzero_twin_is_full_divergence(self):
        report = compare_states(states([0.0]), states([0.1]))

        assert report.worst == 1.0

    def test_custom_threshold(self):
        report = compare_states(states([10.0]), states([10.6]), threshold=0.1)

        assert not report.anomalous

    def test_healthy_type_choice(self):
        report = compare_states(states([10.0]), states([10.0]), healthy_type="orbital_telemetry")

        assert report.receipt_type == "orbital_telemetry"

    def test_bad_healthy_type(self):
        with pytest.raises(ValueError):
            compare_states(states([1.0]), states([1.0]), healthy_type="bore_progress")

    def test_empty_sequences(self):
        with pytest.raises(ValueError):
            compare_states([], [])

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            compare_states(states([1.0, 2.0]), states([1.0]))

    def test_measurement_keys_mismatch(self):
        with pytest.raises(ValueError):
            compare_states(states([1.0], rpm=3.0), states([1.0]))

    def test_anomaly_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="glyphledger.detect"):
            compare_states(states([10.0]), states([20.0]))

        assert any("exceeds" in r.getMessage() for r in caplog.records)


class TestTwinReceipt:

    def test_healthy_entanglement_receipt_validates(self):
        report = compare_states(states([10.0, 11.0]), states([10.0, 11.2]))

        receipt = build_twin_receipt(report, TENANT_ID, timestamp=1)

        assert validate_receipt(receipt)
        assert verify_content_hash(receipt)
        assert receipt["receipt_type"] == "entanglement_prediction"
        assert receipt["correlation_score"] == pytest.approx(1.0 - report.worst)
        assert receipt["predicted_negation_ms"] == 0.0
        assert receipt["emitted_by"] == "digital-twin-groot"

    def test_anomaly_receipt_fields(self):
        report = compare_states(states([10.0]), states([15.0]))

        receipt = build_twin_receipt(report, TENANT_ID, timestamp=1)

        assert validate_receipt(receipt)
        assert receipt["receipt_type"] == "anomaly_detected"
        assert receipt["divergence_percent"] == pytest.approx(50.0)
        assert receipt["root_real"] == report.real_root
        assert receipt["root_twin"] == report.twin_root
        assert "correlation_score" not in receipt

    def test_orbital_receipt_needs_extra_fields(self):
        report = compare_states(states([1.0]), states([1.0]), healthy_type="orbital_telemetry")

        receipt = build_twin_receipt(
            report, TENANT_ID,
            extra_fields={"satellite_id": "sat-7", "signal_strength_dbm": -90.0, "latency_ms": 30.0},
            timestamp=1,
        )

        assert validate_receipt(receipt)


class TestZkStub:

    def test_golden_proof_passes(self):
        assert verify_zk_stub(stamped("zk_anomaly_proof"))

    def test_wrong_type(self):
        assert not verify_zk_stub(stamped("bore_progress"))

    def test_missing_hint(self):
        receipt = stamped("zk_anomaly_proof")
        del receipt["anomaly_hint"]

        assert not verify_zk_stub(receipt)

    @pytest.mark.parametrize("component", ["pi_a", "pi_b", "pi_c"])
    def test_empty_component(self, component):
        receipt = stamped("zk_anomaly_proof")
        receipt["zk_proof"] = dict(receipt["zk_proof"], **{component: []})

        assert not verify_zk_stub(receipt)

    def test_empty_public_inputs(self):
        assert not verify_zk_stub(stamped("zk_anomaly_proof", public_inputs=[]))
