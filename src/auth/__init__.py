from .errors import InvalidCredentials, Unauthorized
from .gate import Decision, authorize, denial_reason
from .users import DEFAULT_USERS, StaticUserDirectory, User, UserDirectory

__all__ = [
    "InvalidCredentials",
    "Unauthorized",
    "Decision",
    "authorize",
    "denial_reason",
    "DEFAULT_USERS",
    "StaticUserDirectory",
    "User",
    "UserDirectory",
]
