"""
Session state container.

Resolved viewer sessions are kept behind the SessionStore port so routes get
them through dependency injection instead of module globals. The in-memory
store is the default; anything with the same three methods can replace it.
"""
import time
from typing import Dict, Optional, Protocol, Tuple

from evano.schemas import ViewerSession


class SessionStore(Protocol):
    """Storage port for resolved sessions, keyed by access token."""

    def get(self, token: str) -> Optional[ViewerSession]: ...

    def put(self, session: ViewerSession) -> None: ...

    def drop(self, token: str) -> None: ...

    def drop_user(self, user_id: str) -> None: ...


class MemorySessionStore:
    """Process-local session store with a time-to-live."""

    def __init__(self, ttl_seconds: float = 300, clock=time.monotonic):
        self.ttl = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, Tuple[float, ViewerSession]] = {}

    def get(self, token: str) -> Optional[ViewerSession]:
        entry = self._sessions.get(token)
        if entry is None:
            return None
        stored_at, session = entry
        if self._clock() - stored_at > self.ttl:
            del self._sessions[token]
            return None
        return session

    def put(self, session: ViewerSession) -> None:
        self._sessions[session.access_token] = (self._clock(), session)

    def drop(self, token: str) -> None:
        self._sessions.pop(token, None)

    def drop_user(self, user_id: str) -> None:
        """Forget every session of one user (after a tier change or account deletion)."""
        for token in [t for t, (_, s) in self._sessions.items() if s.user_id == user_id]:
            del self._sessions[token]

    def __len__(self) -> int:
        return len(self._sessions)
