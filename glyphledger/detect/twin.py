"""Digital twin divergence detection.

Compares paired (real, twin) asset state sequences, classifies the worst
relative divergence against a threshold, and anchors each sequence as a
Merkle root over per-observation state hashes.
"""
import logging
from dataclasses import dataclass, field

from glyphledger.anchor import build_root
from glyphledger.core.constants import (
    ANOMALY_TYPE,
    HEALTHY_TWIN_TYPES,
    MAX_DIVERGENCE,
    STATE_DECIMALS,
    TWIN_EMITTER,
)
from glyphledger.core.receipt import build_receipt, hash_bytes
from glyphledger.crypto import Signer

logger = logging.getLogger("glyphledger.detect")


@dataclass(frozen=True)
class AssetState:
    """One observation of an asset at an epoch."""

    asset_id: str
    epoch: int
    position: float
    health: float
    extra: dict = field(default_factory=dict)

    def measurements(self) -> dict[str, float]:
        """position, health, then extra measurements in sorted key order."""
        values = {"position": self.position, "health": self.health}
        for key in sorted(self.extra):
            values[key] = self.extra[key]
        return values

    @classmethod
    def from_dict(cls, data: dict) -> "AssetState":
        """Build from a JSON object.

        Every key besides asset_id, epoch, position and health is an extra
        measurement and must be numeric.

        Raises:
            KeyError: If a known key is missing
            ValueError: If a measurement is not numeric
        """
        known = {"asset_id", "epoch", "position", "health"}
        return cls(
            asset_id=str(data["asset_id"]),
            epoch=int(data["epoch"]),
            position=float(data["position"]),
            health=float(data["health"]),
            extra={k: float(v) for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class DivergenceReport:
    asset_id: str
    worst: float
    average: float
    per_observation: tuple[float, ...]
    real_root: str
    twin_root: str
    threshold: float
    receipt_type: str

    @property
    def roots_match(self) -> bool:
        return self.real_root == self.twin_root

    @property
    def anomalous(self) -> bool:
        return self.receipt_type == ANOMALY_TYPE

    @property
    def divergence_percent(self) -> float:
        return self.worst * 100.0


def relative_divergence(a: float, b: float) -> float:
    """0 if both zero, 1 if only a is zero, else min(|a-b|/|a|, 1)."""
    if a == 0 and b == 0:
        return 0.0
    if a == 0:
        return 1.0
    return min(abs(a - b) / abs(a), 1.0)


def hash_state(state: AssetState) -> str:
    """Deterministic hash of one observation with fixed decimal precision."""
    parts = [f"asset_id={state.asset_id}", f"epoch={state.epoch}"]
    parts.extend(f"{k}={v:.{STATE_DECIMALS}f}" for k, v in state.measurements().items())
    return hash_bytes("|".join(parts))


def state_root(states: list[AssetState]) -> str:
    """Merkle root over the per-observation state hashes."""
    return build_root([hash_state(s) for s in states])


def _pair_divergence(real: AssetState, twin: AssetState) -> float:
    real_m, twin_m = real.measurements(), twin.measurements()
    if real_m.keys() != twin_m.keys():
        raise ValueError(
            f"measurement keys differ at epoch {real.epoch}: "
            f"{sorted(real_m)} vs {sorted(twin_m)}"
        )
    return max(relative_divergence(real_m[k], twin_m[k]) for k in real_m)


def compare_states(
    real: list[AssetState],
    twin: list[AssetState],
    threshold: float = MAX_DIVERGENCE,
    healthy_type: str = "entanglement_prediction",
) -> DivergenceReport:
    """Classify a paired sequence of observations.

    Worst divergence <= threshold is healthy and reported as healthy_type;
    anything above is anomaly_detected.

    Raises:
        ValueError: Empty or unequal sequences, mismatched measurements,
            or a healthy_type that is not a healthy twin type
    """
    if healthy_type not in HEALTHY_TWIN_TYPES:
        raise ValueError(f"healthy_type must be one of {HEALTHY_TWIN_TYPES}, got {healthy_type!r}")
    if not real:
        raise ValueError("state sequences must be non-empty")
    if len(real) != len(twin):
        raise ValueError(f"state sequences differ in length: {len(real)} vs {len(twin)}")

    per_observation = tuple(_pair_divergence(r, t) for r, t in zip(real, twin))
    worst = max(per_observation)
    average = sum(per_observation) / len(per_observation)

    receipt_type = healthy_type if worst <= threshold else ANOMALY_TYPE
    report = DivergenceReport(
        asset_id=real[0].asset_id,
        worst=worst,
        average=average,
        per_observation=per_observation,
        real_root=state_root(real),
        twin_root=state_root(twin),
        threshold=threshold,
        receipt_type=receipt_type,
    )

    if report.anomalous:
        logger.warning(
            "twin divergence %.4f exceeds %.4f for %s", worst, threshold, report.asset_id
        )
    else:
        logger.debug("twin divergence %.4f within %.4f for %s", worst, threshold, report.asset_id)
    return report


def build_twin_receipt(
    report: DivergenceReport,
    tenant_id: str,
    extra_fields: dict | None = None,
    emitted_by: str = TWIN_EMITTER,
    timestamp: int | None = None,
    signer: Signer | None = None,
) -> dict:
    """Stamped receipt for a divergence report.

    extra_fields carries type-specific fields the report cannot supply
    (e.g. satellite_id for orbital_telemetry).
    """
    data = {}
    if report.receipt_type == "entanglement_prediction":
        data["correlation_score"] = round(1.0 - report.worst, STATE_DECIMALS)
        data["predicted_negation_ms"] = 0.0
    data.update(extra_fields or {})
    data.update({
        "asset_id": report.asset_id,
        "root_real": report.real_root,
        "root_twin": report.twin_root,
        "divergence_percent": report.divergence_percent,
        "average_divergence_percent": report.average * 100.0,
    })
    return build_receipt(
        report.receipt_type,
        data,
        tenant_id,
        emitted_by,
        timestamp=timestamp,
        signer=signer,
    )
