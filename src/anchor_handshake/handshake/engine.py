"""Three-party challenge/response handshake (client_domain web authentication).

The Origin requests a challenge for the Subject's account, hands it to the
Subject for signing inside the Subject's own trust boundary, then co-signs the
returned envelope with the Origin key and submits it for an access token.

The engine never sees the Subject's key. Between ``request_challenge`` and
``co_sign`` control is outside the engine for an arbitrary time, possibly in
another process, so ``co_sign`` may also be the first call on a fresh engine.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum

from ..client.http import HttpTransport
from ..directory import EndpointResolver
from ..envelope import ChallengeCodec, ChallengePolicy, EnvelopeView
from ..errors import (
    AnchorHandshakeError,
    ChallengeRequestFailed,
    DuplicateSignature,
    InvalidStateTransition,
    MalformedEnvelope,
    OriginSignatureMissing,
    SigningKeyUnavailable,
    SubjectSignatureMissing,
    SubmissionRejected,
    SubmissionTransportError,
    TransportError,
)
from ..security import SignatureProvider
from ..types import AccessToken, Challenge

logger = logging.getLogger(__name__)


class HandshakeState(str, Enum):
    IDLE = "idle"
    CHALLENGE_REQUESTED = "challenge_requested"
    CHALLENGE_RECEIVED = "challenge_received"
    SUBJECT_SIGNED = "subject_signed"
    ORIGIN_SIGNED = "origin_signed"
    SUBMITTED = "submitted"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


_CO_SIGN_FROM = {
    HandshakeState.IDLE,
    HandshakeState.CHALLENGE_RECEIVED,
    HandshakeState.SUBJECT_SIGNED,
}
_SUBMIT_FROM = _CO_SIGN_FROM | {HandshakeState.ORIGIN_SIGNED}


class HandshakeEngine:
    """State machine for one handshake. Not shared between handshakes."""

    def __init__(
        self,
        home_domain: str,
        client_domain: str | None,
        origin_signer: SignatureProvider,
        transport: HttpTransport,
        *,
        resolver: EndpointResolver | None = None,
        codec: ChallengeCodec | None = None,
        policy: ChallengePolicy | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.home_domain = home_domain
        self.client_domain = client_domain
        self.origin_signer = origin_signer
        self.transport = transport
        self.resolver = resolver or EndpointResolver(transport)
        self.codec = codec or ChallengeCodec()
        self.policy = policy or ChallengePolicy()
        self.clock = clock

        self.state = HandshakeState.IDLE
        self.failure: AnchorHandshakeError | None = None
        self.challenge: Challenge | None = None
        self.token: AccessToken | None = None

    # -- state helpers ---------------------------------------------------

    def _require(self, allowed: set[HandshakeState], operation: str) -> None:
        if self.state not in allowed:
            raise InvalidStateTransition(f"{operation} not allowed in state {self.state.value}")

    def _fail(self, err: AnchorHandshakeError) -> AnchorHandshakeError:
        self.state = HandshakeState.FAILED
        self.failure = err
        return err

    def reset(self) -> None:
        self.state = HandshakeState.IDLE
        self.failure = None
        self.challenge = None
        self.token = None

    # -- step 1 ----------------------------------------------------------

    def request_challenge(self, subject_account: str, timeout: float | None = None) -> Challenge:
        """Fetch a challenge for ``subject_account`` and validate it before it is signed."""
        self._require({HandshakeState.IDLE}, "request_challenge")
        if not subject_account:
            raise self._fail(ChallengeRequestFailed("Missing required field: account"))
        self.state = HandshakeState.CHALLENGE_REQUESTED
        logger.info(f"Getting challenge for {subject_account} from {self.home_domain}")

        try:
            directory = self.resolver.resolve(self.home_domain, timeout=timeout)
            auth_endpoint = directory.auth_endpoint
        except AnchorHandshakeError as e:
            self._fail(e)
            raise

        params = {"account": subject_account}
        if self.client_domain:
            params["client_domain"] = self.client_domain
        try:
            resp = self.transport.get(auth_endpoint, params=params, timeout=timeout)
        except TransportError as e:
            raise self._fail(ChallengeRequestFailed(details=e.message)) from e
        if not resp.ok or not isinstance(resp.body, dict):
            logger.warning(f"Challenge request rejected: {resp.details}")
            raise self._fail(ChallengeRequestFailed(details=resp.details))

        envelope = resp.body.get("transaction")
        network_passphrase = resp.body.get("network_passphrase")
        if not envelope or not network_passphrase:
            raise self._fail(
                ChallengeRequestFailed(
                    "challenge response is missing transaction or network_passphrase",
                    details=resp.body,
                )
            )

        try:
            view = self.codec.decode(envelope, network_passphrase)
            self.policy.validate(
                view,
                subject_account=subject_account,
                now=self.clock(),
                client_domain=self.client_domain,
                origin_account=self.origin_signer.public_key,
                server_account=directory.signing_key,
            )
        except AnchorHandshakeError as e:
            self._fail(e)
            raise

        self.challenge = view.to_challenge(envelope, auth_endpoint)
        self.state = HandshakeState.CHALLENGE_RECEIVED
        logger.info(f"Challenge received from anchor, network: {network_passphrase}")
        return self.challenge

    # -- steps 2 and 3 ---------------------------------------------------

    def accept_subject_signature(self, envelope: str, network_passphrase: str) -> EnvelopeView:
        """Take back the envelope signed in the Subject's boundary and check it.

        Re-checks expiry because the Subject may have taken arbitrarily long.
        """
        self._require(_CO_SIGN_FROM, "accept_subject_signature")
        try:
            view = self._check_returned_envelope(envelope, network_passphrase)
        except AnchorHandshakeError as e:
            self._fail(e)
            raise
        self.state = HandshakeState.SUBJECT_SIGNED
        return view

    def _check_returned_envelope(self, envelope: str, network_passphrase: str) -> EnvelopeView:
        if self.challenge is not None and network_passphrase != self.challenge.network_id:
            raise MalformedEnvelope(
                "network passphrase differs from the one the challenge was issued for"
            )
        view = self.codec.decode(envelope, network_passphrase)
        self.policy.check_expiry(view, self.clock())

        subject = view.subject_account
        if self.challenge is not None and subject != self.challenge.source_account:
            raise SubjectSignatureMissing("envelope was not issued for the requesting account")
        if not subject or not view.signed_by(subject):
            raise SubjectSignatureMissing()
        return view

    def _check_structure(self, view: EnvelopeView, timeout: float | None) -> None:
        directory = self.resolver.resolve(self.home_domain, timeout=timeout)
        self.policy.check_structure(
            view,
            client_domain=self.client_domain,
            origin_account=self.origin_signer.public_key,
            server_account=directory.signing_key,
            require_client_domain=True,
        )

    def co_sign(
        self,
        subject_signed_envelope: str,
        network_passphrase: str,
        timeout: float | None = None,
    ) -> str:
        """Append the Origin signature; returns the fully signed envelope.

        The envelope is checked against the challenge rules again here, so the
        Origin key only ever signs a challenge, never an arbitrary transaction.
        """
        self._require(_CO_SIGN_FROM, "co_sign")
        logger.info("Server signing for client_domain")
        try:
            view = self._check_returned_envelope(subject_signed_envelope, network_passphrase)
            self._check_structure(view, timeout)
            self.state = HandshakeState.SUBJECT_SIGNED

            origin_key = self.origin_signer.public_key
            if origin_key is None:
                raise SigningKeyUnavailable()
            if view.signed_by(origin_key):
                raise DuplicateSignature(f"envelope is already signed by {origin_key}")

            signature = self.origin_signer.sign(subject_signed_envelope, network_passphrase)
            fully_signed = self.codec.append_signature(view, signature)
        except AnchorHandshakeError as e:
            self._fail(e)
            raise

        self.challenge = view.to_challenge(
            fully_signed, self.challenge.auth_endpoint if self.challenge else None
        )
        self.state = HandshakeState.ORIGIN_SIGNED
        logger.info(
            f"Transaction signed by server (client_domain), public key {origin_key}, "
            f"total signatures: {len(view.signatures) + 1}"
        )
        return fully_signed

    # -- step 4 ----------------------------------------------------------

    def submit(
        self,
        fully_signed_envelope: str,
        network_passphrase: str | None = None,
        timeout: float | None = None,
    ) -> AccessToken:
        """POST the co-signed envelope and extract the access token.

        Expiry and both signatures are checked locally first, so an envelope
        that cannot succeed never reaches the Verifier.
        """
        self._require(_SUBMIT_FROM, "submit")
        network_passphrase = network_passphrase or (self.challenge and self.challenge.network_id)
        try:
            if not network_passphrase:
                raise MalformedEnvelope("network passphrase is required to submit")
            view = self._check_returned_envelope(fully_signed_envelope, network_passphrase)
            self._check_structure(view, timeout)
            origin_key = self.origin_signer.public_key
            if origin_key is None or not view.signed_by(origin_key):
                raise OriginSignatureMissing()
            if self.challenge is not None and self.challenge.auth_endpoint:
                auth_endpoint = self.challenge.auth_endpoint
            else:
                auth_endpoint = self.resolver.auth_endpoint(self.home_domain, timeout=timeout)
        except AnchorHandshakeError as e:
            self._fail(e)
            raise

        self.state = HandshakeState.SUBMITTED
        logger.info(f"Submitting to: {auth_endpoint}")
        try:
            resp = self.transport.post(
                auth_endpoint, json={"transaction": fully_signed_envelope}, timeout=timeout
            )
        except TransportError as e:
            raise self._fail(SubmissionTransportError(details=e.message)) from e
        if not resp.ok:
            logger.warning(f"Submission rejected: {resp.details}")
            raise self._fail(SubmissionRejected(details=resp.details))

        token = resp.body.get("token") if isinstance(resp.body, dict) else None
        if not token or not isinstance(token, str):
            raise self._fail(
                SubmissionRejected("auth endpoint returned no token", details=resp.details)
            )

        self.token = AccessToken(token)
        self.challenge = None
        self.state = HandshakeState.AUTHENTICATED
        logger.info(f"Token received from anchor: {self.token.masked()}")
        return self.token

    def complete(
        self, subject_signed_envelope: str, network_passphrase: str, timeout: float | None = None
    ) -> AccessToken:
        """Co-sign and submit in one call."""
        fully_signed = self.co_sign(subject_signed_envelope, network_passphrase, timeout=timeout)
        return self.submit(fully_signed, network_passphrase, timeout=timeout)
