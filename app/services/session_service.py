"""
app/services/session_service.py

Purpose: Session and stage management

- In-memory map of chat ID -> Session (lost on restart)
- Tracks last interaction time
- Per-chat locks so one chat's events are handled one at a time
- Periodic expiry sweep of inactive sessions
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from app.core.logging import get_logger
from app.models.session import Session

logger = get_logger(__name__)


SessionMutator = Callable[[Session], None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    Process-wide session store.

    Every method is synchronous, so on a single event loop a sweep can never
    interleave with a half-applied mutation. Handlers that await between
    reading and writing a session must hold lock_for(chat_id).
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._sessions: Dict[int, Session] = {}
        self._locks: Dict[int, asyncio.Lock] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._sessions

    def now(self) -> datetime:
        return self._clock()

    def get(self, chat_id: int) -> Optional[Session]:
        return self._sessions.get(chat_id)

    def upsert(self, chat_id: int, mutator: Optional[SessionMutator] = None) -> Session:
        """
        Applies mutator to the chat's session, creating it first if needed.

        Args:
            chat_id: Telegram chat ID
            mutator: Callable that changes the session in place

        Returns:
            The stored session
        """
        session = self._sessions.get(chat_id)
        if session is None:
            session = Session(chat_id=chat_id, last_activity=self.now())
            self._sessions[chat_id] = session
            logger.debug(f"Session created for chat {chat_id}")

        if mutator is not None:
            mutator(session)

        return session

    def reset(self, chat_id: int) -> Session:
        """Replaces whatever the chat had with a fresh session."""
        session = Session(chat_id=chat_id, last_activity=self.now())
        self._sessions[chat_id] = session
        logger.debug(f"Session reset for chat {chat_id}")
        return session

    def delete(self, chat_id: int) -> bool:
        """
        Removes the chat's session. Deleting a missing session is a no-op.

        Returns:
            True if a session was removed
        """
        removed = self._sessions.pop(chat_id, None) is not None
        if removed:
            logger.debug(f"Session deleted for chat {chat_id}")
        return removed

    def submitted_sessions(self) -> List[Session]:
        return [session for session in self._sessions.values() if session.is_submitted]

    def lock_for(self, chat_id: int) -> asyncio.Lock:
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[chat_id] = lock
        return lock

    def sweep_expired(self, now: Optional[datetime] = None, window: timedelta = timedelta(hours=1)) -> None:
        """
        Deletes every session whose last activity is older than window.
        Never raises; a failing entry is logged and skipped.
        """
        now = now or self.now()
        removed = 0

        for chat_id, session in list(self._sessions.items()):
            try:
                if session.is_expired(now, window):
                    self._sessions.pop(chat_id, None)
                    removed += 1
            except Exception as e:
                logger.error(f"Failed to sweep session for chat {chat_id}: {e}", exc_info=True)

        # Drop idle locks for chats that no longer have a session
        for chat_id, lock in list(self._locks.items()):
            if chat_id not in self._sessions and not lock.locked():
                self._locks.pop(chat_id, None)

        if removed:
            logger.info(f"🧹 Expiry sweep removed {removed} session(s), {len(self._sessions)} active")


async def run_expiry_sweeper(
    store: SessionStore,
    interval: timedelta,
    window: timedelta
) -> None:
    """
    Sweeps expired sessions every interval until cancelled.

    Args:
        store: Session store to sweep
        interval: Time between sweeps
        window: Inactivity window
    """
    logger.info(
        f"Session sweeper started (every {interval.total_seconds():.0f}s, "
        f"window {window.total_seconds():.0f}s)"
    )

    while True:
        await asyncio.sleep(interval.total_seconds())
        try:
            store.sweep_expired(store.now(), window)
        except Exception as e:
            logger.error(f"Session sweep failed: {e}", exc_info=True)
