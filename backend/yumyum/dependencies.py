"""FastAPI dependency injection."""

from __future__ import annotations

import logging
import uuid

from fastapi import Request

from yumyum.engine.session import EaterSession

logger = logging.getLogger(__name__)


class SessionStoreFull(RuntimeError):
    pass


class SessionStore:
    """In-memory eating sessions keyed by id. Nothing survives a restart."""

    def __init__(self, max_sessions: int) -> None:
        self.max_sessions = max_sessions
        self._sessions: dict[str, EaterSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def add(self, session: EaterSession) -> str:
        if len(self._sessions) >= self.max_sessions:
            raise SessionStoreFull(f"Session limit reached ({self.max_sessions})")
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = session
        logger.debug("Session %s created (%d live)", session_id, len(self._sessions))
        return session_id

    def get(self, session_id: str) -> EaterSession | None:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.dispose()
        logger.debug("Session %s disposed (%d live)", session_id, len(self._sessions))
        return True

    def clear(self) -> None:
        for session_id in list(self._sessions):
            self.remove(session_id)


def get_store(request: Request) -> SessionStore:
    return request.app.state.sessions
