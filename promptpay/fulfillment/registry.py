"""In-memory registry of live fulfillment sessions."""

from __future__ import annotations

from collections import OrderedDict
from functools import lru_cache
from threading import Lock
from typing import Optional

from promptpay.core.config import get_settings
from promptpay.fulfillment.orchestrator import FulfillmentSession


class FulfillmentRegistry:
    """Bounded, lock-guarded map of session id to session.

    Sessions live only for the process lifetime. When full, the oldest
    session is abandoned and evicted.
    """

    def __init__(self, *, max_sessions: int) -> None:
        if max_sessions <= 0:
            raise ValueError("max_sessions must be positive")
        self._max_sessions = max_sessions
        self._lock = Lock()
        self._sessions: "OrderedDict[str, FulfillmentSession]" = OrderedDict()

    def register(self, session: FulfillmentSession) -> None:
        evicted = []
        with self._lock:
            self._sessions[session.session_id] = session
            while len(self._sessions) > self._max_sessions:
                _, oldest = self._sessions.popitem(last=False)
                evicted.append(oldest)
        for oldest in evicted:
            oldest.abandon()

    def get(self, session_id: str) -> Optional[FulfillmentSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def discard(self, session_id: str) -> Optional[FulfillmentSession]:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            session.abandon()
        return session

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


@lru_cache(maxsize=1)
def get_fulfillment_registry() -> FulfillmentRegistry:
    return FulfillmentRegistry(max_sessions=get_settings().fulfillment_max_sessions)


def reset_fulfillment_registry() -> None:
    get_fulfillment_registry.cache_clear()
