"""Signature providers for the Origin side of the handshake."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from nacl import signing
from nacl.encoding import RawEncoder
from stellar_sdk import TransactionEnvelope
from stellar_sdk.decorated_signature import DecoratedSignature
from stellar_sdk.strkey import StrKey

from ..errors import SigningError, SigningKeyUnavailable

logger = logging.getLogger(__name__)


@runtime_checkable
class SignatureProvider(Protocol):
    """Signs an envelope's network-scoped hash with a key it keeps to itself."""

    @property
    def public_key(self) -> str | None: ...

    def sign(self, envelope: str, network_passphrase: str) -> DecoratedSignature: ...


def transaction_hash(envelope: str, network_passphrase: str) -> bytes:
    try:
        return TransactionEnvelope.from_xdr(envelope, network_passphrase).hash()
    except Exception as err:
        raise SigningError(f"envelope could not be hashed for signing: {err}") from err


class OriginSigner:
    """Holds the Origin's ed25519 key for client_domain co-signing.

    Built once at startup from the secret seed. The seed is not retained and
    there is no accessor for key material; only the public key leaves.
    """

    __slots__ = ("_signing_key", "_public_key", "_hint")

    def __init__(self, signing_key: signing.SigningKey | None) -> None:
        self._signing_key = signing_key
        if signing_key is None:
            self._public_key = None
            self._hint = b""
        else:
            raw_public = signing_key.verify_key.encode(encoder=RawEncoder)
            self._public_key = StrKey.encode_ed25519_public_key(raw_public)
            self._hint = raw_public[-4:]

    @classmethod
    def from_seed(cls, seed: str | None) -> OriginSigner:
        if not seed:
            logger.warning("CLIENT_SIGNING_KEY not set. Client domain signing will fail.")
            return cls(None)
        try:
            raw_seed = StrKey.decode_ed25519_secret_seed(seed)
        except ValueError:
            # Chained exception text could echo the seed.
            raise SigningError("CLIENT_SIGNING_KEY is not a valid ed25519 secret seed") from None
        return cls(signing.SigningKey(raw_seed))

    @property
    def available(self) -> bool:
        return self._signing_key is not None

    @property
    def public_key(self) -> str | None:
        return self._public_key

    def sign(self, envelope: str, network_passphrase: str) -> DecoratedSignature:
        if self._signing_key is None:
            raise SigningKeyUnavailable()
        tx_hash = transaction_hash(envelope, network_passphrase)
        try:
            signature_bytes = self._signing_key.sign(tx_hash, encoder=RawEncoder).signature
        except Exception as err:
            raise SigningError("ed25519 signing failed") from err
        return DecoratedSignature(self._hint, signature_bytes)

    def __repr__(self) -> str:
        return f"OriginSigner(public_key={self._public_key!r})"

    def __reduce__(self):
        raise TypeError("OriginSigner cannot be serialized")
