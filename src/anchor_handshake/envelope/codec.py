"""Envelope codec: base64 XDR transaction envelopes <-> structural views."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey
from stellar_sdk import TransactionEnvelope
from stellar_sdk.decorated_signature import DecoratedSignature
from stellar_sdk.strkey import StrKey

from ..errors import EncodingError, MalformedEnvelope
from ..types import Challenge, OperationView, SignatureEntry, TimeBounds

logger = logging.getLogger(__name__)


@dataclass
class EnvelopeView:
    """Read-only structural view of a parsed envelope."""

    envelope: TransactionEnvelope
    network_passphrase: str
    transaction_source: str
    sequence: int
    time_bounds: TimeBounds | None
    operations: list[OperationView]
    signatures: list[SignatureEntry]
    tx_hash: bytes

    @property
    def subject_account(self) -> str | None:
        """Source of the first operation: the account the challenge was issued for."""
        if not self.operations:
            return None
        return self.operations[0].source

    def operation_named(self, name: str) -> OperationView | None:
        for op in self.operations:
            if op.name == name:
                return op
        return None

    def signed_by(self, account_id: str) -> bool:
        """True when a signature in the envelope verifies for ``account_id``."""
        try:
            raw_key = StrKey.decode_ed25519_public_key(account_id)
        except ValueError:
            return False
        verify_key = VerifyKey(raw_key)
        hint = raw_key[-4:]
        for entry in self.signatures:
            if entry.hint != hint:
                continue
            try:
                verify_key.verify(self.tx_hash, entry.signature)
                return True
            except BadSignatureError:
                continue
        return False

    def to_challenge(self, envelope: str, auth_endpoint: str | None = None) -> Challenge:
        return Challenge(
            envelope=envelope,
            network_id=self.network_passphrase,
            source_account=self.subject_account or "",
            time_bounds=self.time_bounds,
            auth_endpoint=auth_endpoint,
        )


def _operation_view(op) -> OperationView:
    source = op.source.account_id if op.source is not None else None
    name = getattr(op, "data_name", None)
    value = getattr(op, "data_value", None)
    return OperationView(kind=type(op).__name__, source=source, name=name, value=value)


class ChallengeCodec:
    """Deterministic codec for challenge envelopes.

    ``encode(decode(x))`` reproduces ``x`` byte for byte, and
    ``append_signature`` never touches the signatures already present.
    """

    def decode(self, envelope: str, network_passphrase: str) -> EnvelopeView:
        if not envelope or not network_passphrase:
            raise MalformedEnvelope("envelope and network passphrase are required")
        try:
            te = TransactionEnvelope.from_xdr(envelope, network_passphrase)
            tx = te.transaction
            preconditions = tx.preconditions
            raw_bounds = preconditions.time_bounds if preconditions is not None else None
            view = EnvelopeView(
                envelope=te,
                network_passphrase=network_passphrase,
                transaction_source=tx.source.account_id,
                sequence=tx.sequence,
                time_bounds=(
                    TimeBounds(raw_bounds.min_time, raw_bounds.max_time)
                    if raw_bounds is not None
                    else None
                ),
                operations=[_operation_view(op) for op in tx.operations],
                signatures=[
                    SignatureEntry(hint=bytes(s.signature_hint), signature=bytes(s.signature))
                    for s in te.signatures
                ],
                tx_hash=te.hash(),
            )
        except Exception as err:
            raise MalformedEnvelope(f"envelope could not be parsed: {err}") from err
        return view

    def encode(self, view: EnvelopeView) -> str:
        try:
            return view.envelope.to_xdr()
        except Exception as err:
            raise EncodingError(f"envelope could not be serialized: {err}") from err

    def append_signature(self, view: EnvelopeView, signature: DecoratedSignature) -> str:
        if not isinstance(signature, DecoratedSignature):
            raise EncodingError("signature must be a DecoratedSignature")
        try:
            # Work on a fresh copy so the caller's view stays as decoded.
            te = TransactionEnvelope.from_xdr(view.envelope.to_xdr(), view.network_passphrase)
            te.signatures.append(signature)
            encoded = te.to_xdr()
        except Exception as err:
            raise EncodingError(f"envelope could not be serialized: {err}") from err
        logger.debug(f"Envelope now carries {len(te.signatures)} signatures")
        return encoded
