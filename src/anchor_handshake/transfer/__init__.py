from .session import SessionState, SessionTracker

__all__ = ["SessionState", "SessionTracker"]
