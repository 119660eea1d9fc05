"""Subject-side signing.

Runs in the account holder's own context (wallet, browser bridge, CLI). Only
the signed envelope is handed to the Origin; the keypair stays here.
"""

from __future__ import annotations

from stellar_sdk import Keypair, TransactionEnvelope
from stellar_sdk.decorated_signature import DecoratedSignature


class WalletError(Exception):
    pass


class SubjectSigner:
    __slots__ = ("_keypair",)

    def __init__(self, keypair: Keypair) -> None:
        if not keypair.can_sign():
            raise WalletError("keypair has no secret key")
        self._keypair = keypair

    @classmethod
    def from_secret(cls, secret: str) -> SubjectSigner:
        try:
            keypair = Keypair.from_secret(secret)
        except ValueError:
            raise WalletError("not a valid secret seed") from None
        return cls(keypair)

    @property
    def public_key(self) -> str:
        return self._keypair.public_key

    def sign(self, envelope: str, network_passphrase: str) -> DecoratedSignature:
        te = self._parse(envelope, network_passphrase)
        return self._keypair.sign_decorated(te.hash())

    def sign_envelope(self, envelope: str, network_passphrase: str) -> str:
        """Return ``envelope`` with this account's signature appended."""
        te = self._parse(envelope, network_passphrase)
        te.sign(self._keypair)
        return te.to_xdr()

    @staticmethod
    def _parse(envelope: str, network_passphrase: str) -> TransactionEnvelope:
        try:
            return TransactionEnvelope.from_xdr(envelope, network_passphrase)
        except Exception as err:
            raise WalletError(f"challenge could not be parsed: {err}") from err

    def __repr__(self) -> str:
        return f"SubjectSigner(public_key={self.public_key!r})"

    def __reduce__(self):
        raise TypeError("SubjectSigner cannot be serialized")
