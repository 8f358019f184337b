"""Unit tests for crypto.stub.

Functions tested: StubSigner.sign, StubSigner.verify, sign_receipt, verify_receipt_signature
"""
import blake3
import pytest

from conftest import stamped
from glyphledger.core.receipt import stamp_receipt
from glyphledger.crypto import Signer, StubSigner, sign_receipt, verify_receipt_signature


class TestStubSigner:
    """The placeholder binds (content_hash, tenant_id)."""

    def test_sign_formula(self):
        digest = "ab" * 32
        expected = blake3.blake3(f"{digest}t1|kyber-1024-stub".encode()).hexdigest()

        assert StubSigner().sign(digest, "t1") == expected

    def test_deterministic(self):
        signer = StubSigner()

        assert signer.sign("ab" * 32, "t1") == signer.sign("ab" * 32, "t1")

    def test_tenant_binding(self):
        signer = StubSigner()

        assert signer.sign("ab" * 32, "t1") != signer.sign("ab" * 32, "t2")

    def test_verify_round(self):
        signer = StubSigner()
        sig = signer.sign("cd" * 32, "t1")

        assert signer.verify(sig, "cd" * 32, "t1")
        assert not signer.verify(sig, "cd" * 32, "t2")
        assert not signer.verify(sig, "ce" * 32, "t1")

    def test_verify_non_string(self):
        assert StubSigner().verify(None, "cd" * 32, "t1") is False

    def test_verify_non_ascii_signature(self):
        assert StubSigner().verify("é" * 64, "cd" * 32, "t1") is False

    def test_satisfies_protocol(self):
        assert isinstance(StubSigner(), Signer)


class TestReceiptSignature:

    def test_stamped_receipt_verifies(self):
        assert verify_receipt_signature(stamped("orbital_telemetry"))

    def test_moved_tenant_fails(self):
        """Changing tenant_id alone breaks the signature."""
        receipt = dict(stamped("orbital_telemetry"), tenant_id="other-tenant")

        assert not verify_receipt_signature(receipt)

    def test_missing_signature_fails(self):
        receipt = stamped("orbital_telemetry")
        del receipt["signature"]

        assert not verify_receipt_signature(receipt)

    def test_custom_signer(self):
        """A different signer plugs into stamping and verification."""
        signer = StubSigner(tag="|test-tag")
        receipt = stamp_receipt(stamped("bore_progress"), signer=signer)

        assert verify_receipt_signature(receipt, signer)
        assert not verify_receipt_signature(receipt)

    def test_sign_receipt_matches_stamp(self):
        receipt = stamped("zk_anomaly_proof")

        assert sign_receipt(receipt) == receipt["signature"]

    def test_sign_receipt_needs_hash(self):
        with pytest.raises(ValueError):
            sign_receipt({"tenant_id": "t1"})
