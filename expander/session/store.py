from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable

from expander.canvas.outpaint import ImageAIService, create_default_service
from expander.config import settings
from expander.errors import SessionNotFoundError
from expander.session.state import ExpanderSession


logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory sessions, least recently used evicted past `max_sessions`."""

    def __init__(
        self,
        service_factory: Callable[[], ImageAIService] = create_default_service,
        *,
        max_sessions: int | None = None,
    ) -> None:
        self._service_factory = service_factory
        self._max_sessions = max(1, max_sessions or settings.session_max_count)
        self._sessions: OrderedDict[str, ExpanderSession] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> ExpanderSession:
        session = ExpanderSession(self._service_factory())
        with self._lock:
            self._sessions[session.id] = session
            while len(self._sessions) > self._max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info("evicted session %s", evicted_id)
        return session

    def get(self, session_id: str) -> ExpanderSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(f"session not found: {session_id}")
            self._sessions.move_to_end(session_id)
            return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(f"session not found: {session_id}")


_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
