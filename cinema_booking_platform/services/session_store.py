"""
In-process registry of booking sessions with idle expiry.
"""

import logging
import time
from typing import Dict, Optional
from uuid import uuid4

from ..config import get_settings
from ..schemas.catalog import Movie
from ..utils.exceptions import SessionNotFoundError
from .reservation_service import CheckoutState
from .selection import SeatSelection

logger = logging.getLogger(__name__)


class BookingSession:
    """Everything one browsing user holds between requests."""

    def __init__(self, movie: Movie, selection: SeatSelection, session_id: Optional[str] = None):
        self.id = session_id or str(uuid4())
        self.movie = movie
        self.selection = selection
        self.checkout = CheckoutState()
        self.created_at = time.time()
        self.last_seen = self.created_at

    def touch(self) -> None:
        self.last_seen = time.time()


class SessionStore:
    """Session registry; sessions idle longer than ``ttl_seconds`` are dropped."""

    def __init__(self, ttl_seconds: Optional[int] = None, max_sessions: Optional[int] = None):
        settings = get_settings()
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.session_ttl_minutes * 60
        self.max_sessions = max_sessions or settings.max_sessions
        self._sessions: Dict[str, BookingSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def add(self, session: BookingSession) -> BookingSession:
        """
        Register a session, evicting expired ones first.

        When the store is full the least recently used session is evicted.
        """
        self.purge_expired()
        if len(self._sessions) >= self.max_sessions:
            oldest = min(self._sessions.values(), key=lambda s: s.last_seen)
            logger.warning(f"Session store full, evicting session {oldest.id}")
            del self._sessions[oldest.id]
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> BookingSession:
        """
        Get a live session and refresh its idle timer.

        Raises:
            SessionNotFoundError: If the session is unknown or expired
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if self._is_expired(session):
            del self._sessions[session_id]
            logger.info(f"Session {session_id} expired")
            raise SessionNotFoundError(session_id)
        session.touch()
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def purge_expired(self) -> int:
        expired = [sid for sid, session in self._sessions.items() if self._is_expired(session)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info(f"Purged {len(expired)} expired sessions")
        return len(expired)

    def _is_expired(self, session: BookingSession) -> bool:
        return time.time() - session.last_seen > self.ttl_seconds
