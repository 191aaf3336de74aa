"""In-memory registry of live plotting sessions."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Callable

from ..pipelines import PlotSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Least-recently-used session map with an idle timeout.

    Sessions untouched for ``idle_seconds`` are dropped on the next access,
    and the oldest session is evicted once ``max_sessions`` is exceeded.
    """

    def __init__(
        self,
        *,
        max_sessions: int,
        idle_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_sessions = max_sessions
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, PlotSession]] = OrderedDict()

    def __len__(self) -> int:
        self._expire()
        return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        self._expire()
        return session_id in self._entries

    def __setitem__(self, session_id: str, session: PlotSession) -> None:
        self._expire()
        self._entries[session_id] = (self._clock(), session)
        self._entries.move_to_end(session_id)
        while len(self._entries) > self.max_sessions:
            evicted, _ = self._entries.popitem(last=False)
            logger.info("Evicted session %s (limit %d)", evicted, self.max_sessions)

    def __delitem__(self, session_id: str) -> None:
        del self._entries[session_id]

    def get(self, session_id: str) -> PlotSession | None:
        """Return the session and mark it as recently used."""

        self._expire()
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        session = entry[1]
        self._entries[session_id] = (self._clock(), session)
        self._entries.move_to_end(session_id)
        return session

    def _expire(self) -> None:
        cutoff = self._clock() - self.idle_seconds
        # entries are ordered by last use, so stop at the first fresh one
        while self._entries:
            session_id, (touched, _) = next(iter(self._entries.items()))
            if touched > cutoff:
                break
            del self._entries[session_id]
            logger.info("Expired idle session %s", session_id)
