"""Account-holder side of the handshake. Deliberately independent of anchor_handshake."""

from .signer import SubjectSigner, WalletError

__all__ = ["SubjectSigner", "WalletError"]
