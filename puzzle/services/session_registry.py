"""In-process registry of live game sessions.

Sessions are kept in memory only (a level is cheap to regenerate). The
registry lock guards the dict; each entry carries its own lock so HTTP
handlers and the Socket.IO trap ticker never run two operations on the same
session at once.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Optional

from puzzle.logging_utils import get_logger
from puzzle.services.game_session import GameSession

log = get_logger("services.session_registry")

_SESSIONS_MAX = 64


class SessionEntry:
    __slots__ = ("session", "lock")

    def __init__(self, session: GameSession):
        self.session = session
        self.lock = threading.RLock()


_sessions: "OrderedDict[str, SessionEntry]" = OrderedDict()
_sessions_lock = threading.Lock()


def register(session: GameSession) -> SessionEntry:
    entry = SessionEntry(session)
    with _sessions_lock:
        _sessions[session.id] = entry
        while len(_sessions) > _SESSIONS_MAX:
            evicted, _ = _sessions.popitem(last=False)
            log.info(event="session_evicted", session=evicted)
    return entry


def get(session_id: Optional[str]) -> Optional[SessionEntry]:
    if not session_id:
        return None
    with _sessions_lock:
        entry = _sessions.get(session_id)
        if entry is not None:
            _sessions.move_to_end(session_id)
        return entry


def discard(session_id: str) -> None:
    with _sessions_lock:
        _sessions.pop(session_id, None)


def clear() -> None:
    with _sessions_lock:
        _sessions.clear()


__all__ = ["SessionEntry", "register", "get", "discard", "clear"]
