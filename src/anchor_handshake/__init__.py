from .client import HttpResponse, HttpTransport
from .config import Settings
from .directory import Directory, EndpointResolver
from .envelope import ChallengeCodec, ChallengePolicy, EnvelopeView
from .handshake import HandshakeEngine, HandshakeState
from .security import OriginSigner, SignatureProvider
from .transfer import SessionState, SessionTracker
from .types import (
    AccessToken,
    Challenge,
    TimeBounds,
    TransferMode,
    TransferSession,
    TransferStatus,
)

__all__ = [
    "AccessToken",
    "Challenge",
    "ChallengeCodec",
    "ChallengePolicy",
    "Directory",
    "EndpointResolver",
    "EnvelopeView",
    "HandshakeEngine",
    "HandshakeState",
    "HttpResponse",
    "HttpTransport",
    "OriginSigner",
    "SessionState",
    "SessionTracker",
    "Settings",
    "SignatureProvider",
    "TimeBounds",
    "TransferMode",
    "TransferSession",
    "TransferStatus",
]
