"""glyphledger constants and thresholds.

All magic numbers live here. No exceptions.
"""

RECEIPT_VERSION = "1.0"
RECEIPT_ID_PREFIX = "receipt-"
RECEIPT_ID_HEX_LEN = 32
HASH_HEX_LEN = 64
MIN_SIGNATURE_HEX_LEN = 64

# Fields excluded from the canonical form
VOLATILE_FIELDS = ("content_hash", "signature", "receipt_id")

DEFAULT_TENANT_ID = "xai-memphis-01"

# Signature stub
SIGNATURE_ALGORITHM_TAG = "|kyber-1024-stub"

# Death criteria: health metric strictly below this triggers
DEATH_PCE_THRESHOLD = 0.90
DEFAULT_PCE_TRANSITIVITY = 1.0

# Digital twin: worst divergence at or below this is healthy
MAX_DIVERGENCE = 0.05
STATE_DECIMALS = 6

# entanglement_prediction bounds
MIN_CORRELATION_SCORE = 0.707
MIN_PREDICTED_NEGATION_MS = 0.0

RECEIPT_TYPES = (
    "bore_progress",
    "orbital_telemetry",
    "zk_anomaly_proof",
    "entanglement_prediction",
    "anomaly_detected",
    "phase_transition",
    "swarm_vote",
    "compaction_complete",
    "voice_page_sent",
)

DEFAULT_PRODUCERS = (
    "rocket-engine",
    "nebula-guard",
    "digital-twin-groot",
    "drax-metrics",
    "mantis-community",
    "star-lord-orchestrator",
    "groot-swarm",
    "ledger-explorer",
)

# Producer names used by the built-in pipelines
COMPACTION_EMITTER = "drax-metrics"
TWIN_EMITTER = "digital-twin-groot"
ANCHOR_EMITTER = "ledger-explorer"

# Receipt types a healthy twin comparison may be reported as
HEALTHY_TWIN_TYPES = ("entanglement_prediction", "orbital_telemetry", "phase_transition")
ANOMALY_TYPE = "anomaly_detected"
