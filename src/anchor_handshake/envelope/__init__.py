from .codec import ChallengeCodec, EnvelopeView
from .policy import CLIENT_DOMAIN_OP, ChallengePolicy

__all__ = ["CLIENT_DOMAIN_OP", "ChallengeCodec", "ChallengePolicy", "EnvelopeView"]
