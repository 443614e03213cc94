"""Mapping between session values and the logged-in principal."""
import logging
import threading
from dataclasses import dataclass
from typing import Dict, MutableMapping

logger = logging.getLogger(__name__)

USER_ID_KEY = 'user_id'
USERNAME_KEY = 'username'


@dataclass(frozen=True, init=False)
class Anonymous:
    """The caller without a session; always id 0 and no username."""
    user_id: int = 0
    username: str = ''

    @property
    def is_authenticated(self) -> bool:
        return False


@dataclass(frozen=True)
class Authenticated:
    user_id: int
    username: str

    @property
    def is_authenticated(self) -> bool:
        return True


ANONYMOUS = Anonymous()


class SessionIdentity:
    """Reads and writes the identity fields of a request-bound session.

    A session is any mutable mapping: Pyramid's cookie session for web
    requests, or one handed out by :class:`InMemorySessionStore`.
    """

    def resolve(self, session: MutableMapping):
        user_id = session.get(USER_ID_KEY)
        username = session.get(USERNAME_KEY)
        if (isinstance(user_id, int) and not isinstance(user_id, bool)
                and user_id > 0 and isinstance(username, str) and username):
            return Authenticated(user_id=user_id, username=username)
        if user_id is not None or username is not None:
            logger.warning('Discarding incomplete session identity')
        self.clear(session)
        return ANONYMOUS

    def establish(self, session: MutableMapping, user_id: int, username: str) -> None:
        session[USER_ID_KEY] = user_id
        session[USERNAME_KEY] = username

    def clear(self, session: MutableMapping) -> None:
        for key in (USER_ID_KEY, USERNAME_KEY):
            if key in session:
                del session[key]


class InMemorySessionStore:
    """Per-token value bags for callers outside the web layer.

    ``get`` hands out a copy; changes persist only through ``save``, and
    saving an empty bag forgets the token.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Dict[str, object]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, token: str) -> Dict[str, object]:
        with self._lock:
            return dict(self._sessions.get(token, {}))

    def save(self, token: str, session: Dict[str, object]) -> None:
        with self._lock:
            if session:
                self._sessions[token] = dict(session)
            else:
                self._sessions.pop(token, None)

    def destroy(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)
