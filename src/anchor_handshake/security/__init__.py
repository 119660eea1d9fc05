"""Signing capabilities for the Origin backend."""

from .signing import OriginSigner, SignatureProvider, transaction_hash

__all__ = ["OriginSigner", "SignatureProvider", "transaction_hash"]
