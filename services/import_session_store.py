"""
Temporary storage for CSV import sessions.
Keeps sessions in memory with an idle TTL.
Single-server only; a restart drops every open import.
"""
import threading
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional

DEFAULT_TTL_MINUTES = 30


class ImportSessionStore:
    """
    Session id -> session object, expiring after ttl_minutes idle.

    Shared by the event loop and threadpool workers, so every read-modify of
    the cache happens under one lock.
    """

    def __init__(self, ttl_minutes: int = DEFAULT_TTL_MINUTES):
        self.ttl = timedelta(minutes=ttl_minutes)
        self._cache: dict[str, tuple[datetime, Any]] = {}
        self._lock = threading.Lock()

    def new_id(self) -> str:
        return str(uuid.uuid4())

    def store(self, session_id: str, data: Any) -> str:
        """Store or replace a session, return its id."""
        with self._lock:
            self._cache[session_id] = (datetime.now() + self.ttl, data)
            self._cleanup_expired()
        return session_id

    def retrieve(self, session_id: str) -> Optional[Any]:
        """Retrieve a session and push back its expiry. None if expired/not found."""
        with self._lock:
            entry = self._cache.get(session_id)
            if entry is None:
                return None
            expires_at, data = entry
            if datetime.now() > expires_at:
                del self._cache[session_id]
                return None
            self._cache[session_id] = (datetime.now() + self.ttl, data)
            return data

    def delete(self, session_id: str) -> None:
        """Remove session after completion or close."""
        with self._lock:
            self._cache.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def _cleanup_expired(self) -> None:
        """Remove all expired entries. Caller holds the lock."""
        now = datetime.now()
        expired = [k for k, (exp, _) in self._cache.items() if now > exp]
        for k in expired:
            del self._cache[k]
