"""Session persistence and per-session turn serialization."""

import logging
import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Protocol, runtime_checkable

from media_director.errors import SessionBusyError
from media_director.session.schemas import ConversationState

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionStore(Protocol):
    """Narrow persistence interface for conversation state."""

    def load(self, session_id: str) -> Optional[ConversationState]: ...

    def save(self, state: ConversationState) -> None: ...

    def delete(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """Process-local store. Keeps serialized copies so callers never share objects."""

    def __init__(self) -> None:
        self._states: dict[str, str] = {}
        self._lock = threading.Lock()

    def load(self, session_id: str) -> Optional[ConversationState]:
        with self._lock:
            raw = self._states.get(session_id)
        if raw is None:
            return None
        return ConversationState.model_validate_json(raw)

    def save(self, state: ConversationState) -> None:
        raw = state.model_dump_json()
        with self._lock:
            self._states[state.session_id] = raw

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._states.pop(session_id, None)

    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._states)


class SessionGate:
    """Allows one in-flight turn per session; a second one is rejected."""

    def __init__(self) -> None:
        self._in_flight: set[str] = set()
        self._lock = threading.Lock()

    def is_busy(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._in_flight

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[None]:
        with self._lock:
            if session_id in self._in_flight:
                logger.warning(f"Rejected concurrent turn for session {session_id}")
                raise SessionBusyError(session_id)
            self._in_flight.add(session_id)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(session_id)
