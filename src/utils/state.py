from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional

from db.models import Role, Session
from utils.errors import AuthUnavailable, InvalidCredentials, RepositoryError
from utils.logger import get_logger
from utils.storage import LocalStorage

if TYPE_CHECKING:
    from db.repository import CredentialRepository

_logger = get_logger(__name__)

SESSION_STORAGE_KEY = "user"

# demo accounts; a placeholder for real credential verification
VALID_CREDENTIALS: Dict[str, str] = {
    "user1": "password123",
    "admin1": "adminpassword",
}


class SessionState(str, Enum):
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


def can_mutate_products(session: Optional[Session]) -> bool:
    """The one capability check consulted by every product mutation site."""
    return session is not None and session.role == Role.ADMIN


def _parse_session(raw: str) -> Optional[Session]:
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    sid, username, role = data.get("id"), data.get("username"), data.get("role")
    if not isinstance(sid, str) or not isinstance(username, str):
        return None
    try:
        return Session(id=sid, username=username, role=Role(role))
    except ValueError:
        return None


class SessionStore:
    """
    Owns the current identity and keeps it in durable storage.

    Lifecycle: LOADING until restore() runs, then ANONYMOUS or AUTHENTICATED.
    sign_in passes through AUTHENTICATING; sign_out goes back to ANONYMOUS.
    """

    def __init__(self, credentials: CredentialRepository, storage: LocalStorage):
        self._credentials = credentials
        self._storage = storage
        self.session: Optional[Session] = None
        self.state = SessionState.LOADING

    @property
    def role(self) -> Optional[Role]:
        return self.session.role if self.session else None

    @property
    def is_admin(self) -> bool:
        return can_mutate_products(self.session)

    def _set_session(self, session: Optional[Session]) -> None:
        self.session = session
        if session is None:
            self._storage.remove_item(SESSION_STORAGE_KEY)
            self.state = SessionState.ANONYMOUS
        else:
            self._storage.set_item(SESSION_STORAGE_KEY, json.dumps(session.to_dict()))
            self.state = SessionState.AUTHENTICATED

    def restore(self) -> Optional[Session]:
        """
        Reload the persisted session, if any. Malformed data is dropped
        and the store stays anonymous without telling the user.
        """
        raw = self._storage.get_item(SESSION_STORAGE_KEY)
        session = _parse_session(raw) if raw is not None else None
        if raw is not None and session is None:
            _logger.warning("Discarding malformed persisted session.")
            self._storage.remove_item(SESSION_STORAGE_KEY)

        self.session = session
        self.state = SessionState.AUTHENTICATED if session else SessionState.ANONYMOUS
        return session

    async def sign_in(self, username: str, password: str) -> Session:
        """
        Authenticate against the credential repository and the demo allow-list.

        Raises:
            InvalidCredentials: unknown user, user not on the allow-list, or
                wrong password.
            AuthUnavailable: the credential repository failed.
        """
        self.state = SessionState.AUTHENTICATING
        _logger.info(f"Attempting to sign in with username: {username}")
        try:
            record = await self._credentials.find_user_by_username(username)
        except RepositoryError as e:
            _logger.error(f"Credential lookup failed: {e}")
            self._set_session(None)
            raise AuthUnavailable() from e

        expected = VALID_CREDENTIALS.get(record.username) if record else None
        if expected is None or expected != password:
            self._set_session(None)
            raise InvalidCredentials()

        session = Session(id=record.id, username=record.username, role=Role(record.role))
        self._set_session(session)
        _logger.info(f"Signed in {session.username} as {session.role.value}")
        return session

    def sign_out(self) -> None:
        if self.session is not None:
            _logger.info(f"Signing out {self.session.username}")
        self._set_session(None)
