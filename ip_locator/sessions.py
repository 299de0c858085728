import secrets
from collections import OrderedDict

from ip_locator.logger import logger
from ip_locator.state import LookupSession


class SessionStore:
    """In-memory map of browser session ids to their `LookupSession`.

    Nothing is persisted. When more than `max_sessions` are alive the least
    recently used one is dropped.
    """

    def __init__(self, max_sessions: int = 1000) -> None:
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, LookupSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get_or_create(self, session_id: str | None) -> tuple[str, LookupSession]:
        if session_id and session_id in self._sessions:
            self._sessions.move_to_end(session_id)
            return session_id, self._sessions[session_id]

        new_id = secrets.token_urlsafe(16)
        session = LookupSession()
        self._sessions[new_id] = session

        while len(self._sessions) > self._max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.debug(f"Evicted idle session session={evicted_id}")

        return new_id, session
