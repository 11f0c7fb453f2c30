from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class _SessionRecord(BaseModel):
    """Fields shared by every stored session. Serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    created_at: int
    expires_at: int

    def remaining_ttl(self, now: float) -> int:
        return int(self.expires_at - now)


class AnonymousSession(_SessionRecord):
    kind: Literal["anonymous"] = "anonymous"
    is_authenticated: Literal[False] = False


class AuthenticatedSession(_SessionRecord):
    kind: Literal["authenticated"] = "authenticated"
    user_id: str = Field(min_length=1)
    username: str = Field(min_length=1)
    is_authenticated: Literal[True] = True


SessionData = Annotated[
    Union[AuthenticatedSession, AnonymousSession],
    Field(discriminator="kind"),
]

session_data_adapter: TypeAdapter[SessionData] = TypeAdapter(SessionData)


def dump_session_data(data: SessionData) -> str:
    return data.model_dump_json(by_alias=True)


def load_session_data(raw: Union[str, bytes]) -> SessionData:
    """Parse a stored record. Raises pydantic.ValidationError on corrupt data."""
    return session_data_adapter.validate_json(raw)


def revalidate_session_data(data: SessionData) -> SessionData:
    # model_copy(update=...) skips validation, so mutated records go through this
    return session_data_adapter.validate_python(data.model_dump())


class SessionState(str, Enum):
    ABSENT = "absent"
    INVALID = "invalid"
    VALID = "valid"


@dataclass(frozen=True)
class SessionContext:
    """
    Request-scoped outcome of resolving the session cookie.

    Rebuilt on every request and never persisted. ``reason`` is diagnostic
    only and must not be surfaced to clients.
    """

    state: SessionState
    session_id: Optional[str] = None
    data: Optional[SessionData] = None
    reason: Optional[str] = None

    @classmethod
    def absent(cls, reason: str = "no_cookie", session_id: Optional[str] = None) -> "SessionContext":
        # session_id is only kept when the cookie verified, so logout can still
        # clean up a record the store failed to return
        return cls(state=SessionState.ABSENT, session_id=session_id, reason=reason)

    @classmethod
    def invalid(cls, reason: str, session_id: Optional[str] = None) -> "SessionContext":
        return cls(state=SessionState.INVALID, session_id=session_id, reason=reason)

    @classmethod
    def valid(cls, session_id: str, data: SessionData) -> "SessionContext":
        return cls(state=SessionState.VALID, session_id=session_id, data=data)

    @property
    def is_valid(self) -> bool:
        return self.state is SessionState.VALID and self.data is not None

    @property
    def authenticated(self) -> bool:
        return self.is_valid and self.data.is_authenticated

    @property
    def username(self) -> Optional[str]:
        if self.authenticated:
            return self.data.username
        return None

    @property
    def user_id(self) -> Optional[str]:
        if self.authenticated:
            return self.data.user_id
        return None
