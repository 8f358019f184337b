"""Shape check for zk_anomaly_proof receipts.

Stands in for a Groth16 verifier: it confirms the proof components are
present, not that they verify.
"""


def _nonempty_list(v) -> bool:
    return isinstance(v, list) and len(v) > 0


def verify_zk_stub(receipt: dict) -> bool:
    """True if receipt is a zk_anomaly_proof with complete proof fields and an anomaly_hint."""
    if not isinstance(receipt, dict) or receipt.get("receipt_type") != "zk_anomaly_proof":
        return False

    zk = receipt.get("zk_proof")
    if not isinstance(zk, dict):
        return False

    hint = receipt.get("anomaly_hint")
    return (
        _nonempty_list(zk.get("pi_a"))
        and _nonempty_list(zk.get("pi_b"))
        and _nonempty_list(zk.get("pi_c"))
        and _nonempty_list(receipt.get("public_inputs"))
        and isinstance(hint, str)
        and len(hint) > 0
    )
