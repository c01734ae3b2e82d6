"""
Session Store - per-patient conversation state.

The conversation engine only talks to the SessionStore interface, so the
in-memory map can be swapped for a cache or a database without touching
the state machine.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from loguru import logger

from clinic_booking.config import get_settings
from clinic_booking.models.session import SessionState


class SessionStore(ABC):
    """Mapping from patient identifier to session state."""

    @abstractmethod
    async def get(self, patient_id: str) -> Optional[SessionState]:
        """Current state, or None if the patient has no live session."""

    @abstractmethod
    async def put(self, patient_id: str, state: SessionState) -> None:
        """Replace the patient's state."""

    @abstractmethod
    async def delete(self, patient_id: str) -> None:
        """Forget the patient's state."""

    async def pop_expired(self, patient_id: str) -> Optional[SessionState]:
        """
        Last state of a session dropped for inactivity, if any.

        Reported once; stores without expiry never have one.
        """
        return None


class InMemorySessionStore(SessionStore):
    """
    Process-local session store with idle expiry.

    A session untouched for longer than the TTL is dropped. Its last state
    is held until pop_expired reports it, so the engine can tell an expired
    dialogue from a patient it has never seen.
    """

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if ttl_seconds is None:
            ttl_seconds = get_settings().session_ttl_seconds
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._sessions: Dict[str, SessionState] = {}
        self._touched: Dict[str, datetime] = {}
        self._expired: Dict[str, SessionState] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def get(self, patient_id: str) -> Optional[SessionState]:
        self._cleanup_expired()
        return self._sessions.get(patient_id)

    async def put(self, patient_id: str, state: SessionState) -> None:
        self._sessions[patient_id] = state
        self._touched[patient_id] = self._clock()
        self._expired.pop(patient_id, None)

    async def delete(self, patient_id: str) -> None:
        self._sessions.pop(patient_id, None)
        self._touched.pop(patient_id, None)
        self._expired.pop(patient_id, None)

    async def pop_expired(self, patient_id: str) -> Optional[SessionState]:
        self._cleanup_expired()
        return self._expired.pop(patient_id, None)

    def _cleanup_expired(self) -> None:
        """Remove sessions idle for longer than the TTL."""
        now = self._clock()
        expired = [
            patient_id
            for patient_id, touched in self._touched.items()
            if now - touched > self._ttl
        ]
        for patient_id in expired:
            self._expired[patient_id] = self._sessions.pop(patient_id)
            del self._touched[patient_id]

        if expired:
            logger.debug(f"Expired {len(expired)} idle sessions")


# Singleton instance for reuse
_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get the singleton session store instance."""
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore()
    return _session_store
