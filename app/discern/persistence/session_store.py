"""
Purpose: Session storage (in-memory, process-local).
Why: The controller needs get/put/remove plus a single-writer discipline
per session; entries expire so abandoned dialogues do not pile up.

What is inside:
InMemorySessionStore with
- sliding TTL (an entry expires ttl_seconds after its last touch)
- one lock per session id, held by `locked()` for a whole question cycle;
  a lock exists only while some caller holds or waits on it
- a store-wide lock guarding the maps themselves

Testing:
In-memory: simple state tests; inject `clock` to move time.
"""

from __future__ import annotations
import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from ..models import Session

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


class InMemorySessionStore:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # session_id -> {"session": Session, "expires_at": float}
        self._items: dict[str, dict[str, object]] = {}
        # session_id -> [lock, number of holders and waiters]
        self._session_locks: dict[str, list] = {}

    def _get_unlocked(self, session_id: str) -> Optional[Session]:
        item = self._items.get(session_id)
        if item is None:
            return None

        now = self._clock()
        if float(item["expires_at"]) <= now:
            del self._items[session_id]
            logger.info("Session %s expired", session_id)
            return None

        item["expires_at"] = now + self.ttl_seconds
        return item["session"]  # type: ignore[return-value]

    def _purge_expired_unlocked(self) -> None:
        now = self._clock()
        expired = [
            sid for sid, item in self._items.items() if float(item["expires_at"]) <= now
        ]
        for sid in expired:
            del self._items[sid]
        if expired:
            logger.info("Purged %d expired session(s)", len(expired))

    def _acquire_entry(self, session_id: str) -> threading.Lock:
        with self._lock:
            entry = self._session_locks.get(session_id)
            if entry is None:
                entry = self._session_locks[session_id] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _release_entry(self, session_id: str) -> None:
        with self._lock:
            entry = self._session_locks[session_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._session_locks[session_id]

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._get_unlocked(str(session_id))

    def put(self, session: Session) -> None:
        with self._lock:
            self._purge_expired_unlocked()
            self._items[str(session.session_id)] = {
                "session": session,
                "expires_at": self._clock() + self.ttl_seconds,
            }

    def remove(self, session_id: str) -> Optional[Session]:
        with self._lock:
            item = self._items.pop(str(session_id), None)
        return item["session"] if item else None  # type: ignore[return-value]

    @contextmanager
    def locked(self, session_id: str) -> Iterator[Optional[Session]]:
        """
        Hold the session's lock for the duration of the block and yield the
        session (None when unknown or expired).
        """
        sid = str(session_id)
        lock = self._acquire_entry(sid)
        try:
            with lock:
                yield self.get(sid)
        finally:
            self._release_entry(sid)

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired_unlocked()
            return len(self._items)
