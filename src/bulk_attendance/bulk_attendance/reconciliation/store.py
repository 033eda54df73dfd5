from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from .session import ReviewSession

logger = logging.getLogger(__name__)


class ReviewSessionStore:
    """In-memory holder for stashed uploads and open review sessions.

    Both maps share one lock; entries older than ``ttl`` are purged lazily on
    every access.
    """

    def __init__(self, *, ttl: timedelta, clock: Callable[[], datetime] = now_local):
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._batches: dict[str, tuple[datetime, str]] = {}
        self._sessions: dict[str, tuple[datetime, ReviewSession]] = {}

    @staticmethod
    def new_token() -> str:
        return uuid.uuid4().hex

    def _purge_locked(self) -> None:
        cutoff = self._clock() - self._ttl
        for token in [t for t, (stamp, _) in self._batches.items() if stamp < cutoff]:
            del self._batches[token]
            logger.info("Expired stashed upload %s", token)
        for token in [t for t, (stamp, _) in self._sessions.items() if stamp < cutoff]:
            del self._sessions[token]
            logger.info("Expired review session %s", token)

    # Pending uploads (serialized rows)
    def stash_batch(self, payload: str) -> str:
        token = self.new_token()
        with self._lock:
            self._purge_locked()
            self._batches[token] = (self._clock(), payload)
        return token

    def get_batch(self, token: str) -> Optional[str]:
        with self._lock:
            self._purge_locked()
            entry = self._batches.get(token)
        return entry[1] if entry else None

    def drop_batch(self, token: str) -> None:
        with self._lock:
            self._batches.pop(token, None)

    # Open sessions
    def put_session(self, session: ReviewSession) -> ReviewSession:
        """Store ``session`` unless one is already open for its token; return the stored one."""

        with self._lock:
            self._purge_locked()
            entry = self._sessions.get(session.token)
            if entry is not None:
                return entry[1]
            self._sessions[session.token] = (self._clock(), session)
        return session

    def get_session(self, token: str) -> Optional[ReviewSession]:
        """Return the open session and restart its expiry window."""

        with self._lock:
            self._purge_locked()
            entry = self._sessions.get(token)
            if entry is None:
                return None
            self._sessions[token] = (self._clock(), entry[1])
        return entry[1]

    def discard(self, token: str) -> bool:
        with self._lock:
            had_session = self._sessions.pop(token, None) is not None
            had_batch = self._batches.pop(token, None) is not None
        return had_session or had_batch
