"""Error taxonomy for the handshake engine and transfer sessions.

Every error carries an optional ``details`` payload. When the failure came from
the Verifier, ``details`` is its raw response body, passed through untouched.
"""

from __future__ import annotations

from typing import Any


class AnchorHandshakeError(Exception):
    default_message = "anchor handshake error"

    def __init__(self, message: str | None = None, details: Any = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.details}


class TransportError(AnchorHandshakeError):
    default_message = "HTTP request failed"


class InvalidStateTransition(AnchorHandshakeError):
    default_message = "operation not allowed in the current state"


# Directory resolution


class DirectoryError(AnchorHandshakeError):
    default_message = "service directory resolution failed"


class DirectoryUnreachable(DirectoryError):
    default_message = "service directory could not be fetched"


class DirectoryMalformed(DirectoryError):
    default_message = "service directory is not a valid document"


class EndpointNotAdvertised(DirectoryError):
    def __init__(self, key: str, domain: str | None = None) -> None:
        where = f" in {domain} directory" if domain else ""
        super().__init__(f"{key} not found{where}")
        self.key = key
        self.domain = domain


# Challenge lifecycle


class ChallengeRequestFailed(AnchorHandshakeError):
    default_message = "Failed to get challenge from anchor"


class ChallengeInvalid(ChallengeRequestFailed):
    default_message = "challenge transaction failed validation"


class ChallengeExpired(AnchorHandshakeError):
    default_message = "challenge transaction has expired"


# Codec


class CodecError(AnchorHandshakeError):
    pass


class MalformedEnvelope(CodecError):
    default_message = "envelope could not be parsed"


class EncodingError(CodecError):
    default_message = "envelope could not be serialized"


# Signatures


class SignatureError(AnchorHandshakeError):
    pass


class SigningKeyUnavailable(SignatureError):
    default_message = "CLIENT_SIGNING_KEY not configured on server"


class SigningError(SignatureError):
    default_message = "signing failed"


class SubjectSignatureMissing(SignatureError):
    default_message = "envelope is not signed by the subject account"


class OriginSignatureMissing(SignatureError):
    default_message = "envelope is not co-signed by the origin key"


class DuplicateSignature(SignatureError):
    default_message = "envelope already carries a signature from this key"


# Submission


class SubmissionRejected(AnchorHandshakeError):
    default_message = "Failed to submit transaction"


class SubmissionTransportError(AnchorHandshakeError):
    default_message = "Failed to reach the auth endpoint"


# Interactive transfer


class TransferError(AnchorHandshakeError):
    pass


class MissingField(TransferError):
    def __init__(self, *fields: str) -> None:
        names = ", ".join(fields)
        label = "field" if len(fields) == 1 else "fields"
        super().__init__(f"Missing required {label}: {names}")
        self.fields = fields


class UnsupportedMode(TransferError):
    def __init__(self, mode: str) -> None:
        super().__init__(f"Unsupported transfer mode: {mode!r}")
        self.mode = mode


class InitiationFailed(TransferError):
    default_message = "Failed to start interactive transfer"


class PollTransportError(TransferError):
    default_message = "Failed to get transaction status"


class StatusQueryRejected(TransferError):
    default_message = "Transaction status query rejected"
