"""Session module: conversation state, its store, and the per-session turn gate."""

from media_director.session.schemas import ConversationState, PREFERENCE_NONE, normalize_preference_key
from media_director.session.store import InMemorySessionStore, SessionGate, SessionStore

__all__ = [
    "ConversationState",
    "PREFERENCE_NONE",
    "normalize_preference_key",
    "InMemorySessionStore",
    "SessionGate",
    "SessionStore",
]
