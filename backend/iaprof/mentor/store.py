# backend/iaprof/mentor/store.py

import threading
import uuid
from collections import OrderedDict
from typing import Optional

from iaprof.core.exceptions import SessionNotFoundError
from iaprof.core.logging import get_logger
from iaprof.core.settings import settings
from .ai_mentor import MentorAIService
from .session import MentorSession


class SessionStore:
    """Sessões de estudo em memória, descartando as mais antigas ao atingir o limite."""

    def __init__(self, ai: Optional[MentorAIService] = None, max_sessions: Optional[int] = None):
        self.ai = ai or MentorAIService()
        self.max_sessions = max_sessions or settings.MAX_SESSIONS
        self.logger = get_logger("mentor.store")
        self._sessions: "OrderedDict[str, MentorSession]" = OrderedDict()
        self._lock = threading.Lock()

    def create(self) -> MentorSession:
        session = MentorSession(session_id=uuid.uuid4().hex, ai=self.ai)
        with self._lock:
            self._sessions[session.session_id] = session
            while len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                self.logger.info("Session evicted", evicted_session_id=evicted_id)
        self.logger.info("Session created", session_id=session.session_id, active_sessions=len(self._sessions))
        return session

    def get(self, session_id: str) -> MentorSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            self._sessions.move_to_end(session_id)
            return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
        self.logger.info("Session deleted", session_id=session_id)

    def __len__(self) -> int:
        return len(self._sessions)


_store: Optional[SessionStore] = None
_store_lock = threading.Lock()


def get_session_store() -> SessionStore:
    global _store
    if _store is None:
        with _store_lock:
            # duas primeiras requisições simultâneas não podem criar dois stores
            if _store is None:
                _store = SessionStore()
    return _store
