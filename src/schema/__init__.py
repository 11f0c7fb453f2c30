from .schema import (
    CheckSessionResponse,
    FailureResponse,
    HealthResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    ProfileResponse,
    ProfileUser,
    SecretDataResponse,
    SessionInfo,
    StatusResponse,
    UnauthorizedResponse,
    UserInfo,
)

__all__ = [
    "CheckSessionResponse",
    "FailureResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "ProfileResponse",
    "ProfileUser",
    "SecretDataResponse",
    "SessionInfo",
    "StatusResponse",
    "UnauthorizedResponse",
    "UserInfo",
]
