from .engine import HandshakeEngine, HandshakeState

__all__ = ["HandshakeEngine", "HandshakeState"]
