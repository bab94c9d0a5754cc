"""Per-session evaluation history."""
from areacheck.session.store import History, SessionStore, StripedSessionStore

__all__ = ["History", "SessionStore", "StripedSessionStore"]
