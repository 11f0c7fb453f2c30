import hmac
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

logger = logging.getLogger('session_auth.auth.users')


@dataclass(frozen=True)
class User:
    id: str
    username: str
    password: str


# Demo accounts. Passwords are plain text on purpose: password storage is out
# of scope for this tutorial.
DEFAULT_USERS = (
    User(id="1", username="juan", password="123456"),
    User(id="2", username="maria", password="password"),
    User(id="3", username="admin", password="admin123"),
)


class UserDirectory:
    """Looks up users by credentials."""

    def authenticate(self, username: str, password: str) -> Optional[User]:
        raise NotImplementedError

    def get_user(self, user_id: str) -> Optional[User]:
        raise NotImplementedError


class StaticUserDirectory(UserDirectory):
    def __init__(self, users: Iterable[User] = DEFAULT_USERS):
        self._by_username: Dict[str, User] = {}
        self._by_id: Dict[str, User] = {}
        for user in users:
            if user.username in self._by_username:
                raise ValueError(f"Duplicate username in user directory: {user.username}")
            self._by_username[user.username] = user
            self._by_id[user.id] = user
        logger.info(f"User directory loaded with {len(self._by_username)} users: {sorted(self._by_username)}")

    def authenticate(self, username: str, password: str) -> Optional[User]:
        user = self._by_username.get(username or "")
        if user is None:
            return None
        if not hmac.compare_digest(user.password.encode("utf-8"), (password or "").encode("utf-8")):
            return None
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        return self._by_id.get(user_id)
