"""
Session Management Service for Sales Bot
========================================

This module keeps one in-progress order conversation per chat user.

Architecture Overview:
----------------------
Sessions live in memory only. They are created when an operator starts an
order, mutated by every step of the conversation and dropped when the order
is committed or cancelled. A process restart loses them; actions that point
at a vanished session are answered with "session expired".

Per-User Serialization:
-----------------------
A handler reads the session, awaits a catalog or client search, then writes
the session back. Two events from the same user interleaved across that await
would lose one of the writes, so every event for a user runs inside
`store.lock(user_id)`. Locks are per user: different users never wait on each
other. A lock entry is dropped as soon as nobody holds or awaits it.

Expiry Policy:
--------------
With SESSION_IDLE_TIMEOUT_SECONDS = 0 (the default) sessions never expire.
With a positive timeout a session idle for longer is discarded lazily the
next time it is read, and by cleanup_expired().

Usage:
------
    store = SessionStore()

    async with store.lock(user_id):
        session = store.get(user_id)
        ...
        store.save(user_id, session)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Callable, Optional

from ..config import SESSION_IDLE_TIMEOUT_SECONDS
from ..tasks.models import OrderSession
from ..tasks.schemas import SessionStep

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class KeyedLock:
    """
    One asyncio.Lock per key, created on demand.

    Entries are reference counted so the mapping only holds keys that are
    currently locked or awaited.
    """

    def __init__(self):
        self._locks: dict[int, asyncio.Lock] = {}
        self._waiters: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, key: int) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class SessionStore:
    """
    In-memory store of order sessions keyed by chat user id.

    Constructed once per running service and torn down with close().
    """

    def __init__(
        self,
        idle_timeout_seconds: int = SESSION_IDLE_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the session store.

        Args:
            idle_timeout_seconds: Expire sessions idle for longer; 0 disables expiry.
            clock: Returns the current time; injected so tests can move time.
        """
        self._sessions: dict[int, OrderSession] = {}
        self._locks = KeyedLock()
        self._clock = clock
        self._idle_timeout = (
            timedelta(seconds=idle_timeout_seconds) if idle_timeout_seconds > 0 else None
        )

    def lock(self, user_id: int):
        """Async context manager serializing all work for one user."""
        return self._locks.hold(user_id)

    def _is_expired(self, session: OrderSession) -> bool:
        if self._idle_timeout is None:
            return False
        return self._clock() - session.last_touched > self._idle_timeout

    def get(self, user_id: int) -> Optional[OrderSession]:
        """Return the user's session, or None if there is none or it expired."""
        session = self._sessions.get(user_id)
        if session is None:
            return None
        if self._is_expired(session):
            logger.info("Session for user %s expired after inactivity", user_id)
            del self._sessions[user_id]
            return None
        return session

    def create(self, user_id: int, step: SessionStep, **fields) -> OrderSession:
        """Start a new session for the user, discarding any previous one."""
        if user_id in self._sessions:
            logger.debug("Replacing existing session for user %s", user_id)
        session = OrderSession(step=step, last_touched=self._clock(), **fields)
        self._sessions[user_id] = session
        logger.info("Session started for user %s at step %s", user_id, step.value)
        return session

    def save(self, user_id: int, session: OrderSession) -> None:
        """Store the (mutated) session and refresh its last-touched time."""
        session.last_touched = self._clock()
        self._sessions[user_id] = session

    def clear(self, user_id: int) -> bool:
        """Drop the user's session. Returns True if one existed."""
        existed = self._sessions.pop(user_id, None) is not None
        if existed:
            logger.info("Session cleared for user %s", user_id)
        return existed

    def cleanup_expired(self) -> int:
        """Remove every expired session. Returns how many were removed."""
        expired = [uid for uid, s in self._sessions.items() if self._is_expired(s)]
        for uid in expired:
            del self._sessions[uid]
        if expired:
            logger.debug("Cleaned up %d expired sessions", len(expired))
        return len(expired)

    def close(self) -> None:
        """Drop all sessions; called on service shutdown."""
        count = len(self._sessions)
        self._sessions.clear()
        logger.info("Session store closed (%d sessions discarded)", count)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: int) -> bool:
        return self.get(user_id) is not None
