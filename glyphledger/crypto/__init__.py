"""Signature capability: pluggable Signer protocol and the placeholder stub."""
from .stub import Signer, StubSigner, sign_receipt, verify_receipt_signature

__all__ = ["Signer", "StubSigner", "sign_receipt", "verify_receipt_signature"]
