from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials posted by the browser. Missing fields count as wrong credentials."""

    username: str = Field(
        description="Username to log in as",
        default="",
        examples=["juan"],
    )
    password: str = Field(
        description="Plain text password",
        default="",
        examples=["123456"],
    )


class UserInfo(BaseModel):
    id: str = Field(
        description="User identifier",
        examples=["1"],
    )
    username: str = Field(
        description="Username",
        examples=["juan"],
    )


class LoginResponse(BaseModel):
    success: bool = Field(
        description="Whether the login succeeded"
    )
    message: str = Field(
        description="Human readable outcome",
        default="Login successful",
    )
    user: UserInfo = Field(
        description="The user that is now logged in"
    )


class FailureResponse(BaseModel):
    """Body for failed login/logout attempts."""

    success: bool = False
    message: str = Field(
        description="Generic, client-safe failure message"
    )
    error_code: Optional[str] = Field(
        description="Enumerable failure category, present for retryable failures",
        default=None,
        examples=["store_unavailable"],
    )


class UnauthorizedResponse(BaseModel):
    error: str = Field(
        description="Generic unauthorized message"
    )
    authenticated: bool = False


class CheckSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool = Field(
        description="Whether the presented cookie maps to an authenticated session"
    )
    username: Optional[str] = Field(
        description="Username of the logged in user, null when anonymous",
        default=None,
    )
    session_id: str = Field(
        alias="sessionId",
        description="Session identifier. Anonymous callers get a fresh, unsaved one on every request",
    )


class ProfileUser(UserInfo):
    model_config = ConfigDict(populate_by_name=True)

    login_time: str = Field(
        alias="loginTime",
        description="ISO timestamp of when the session was created",
    )


class SessionInfo(BaseModel):
    id: str = Field(
        description="Session identifier"
    )
    authenticated: bool


class ProfileResponse(BaseModel):
    success: bool = True
    user: ProfileUser
    session: SessionInfo


class SecretDataResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    secret_data: str = Field(
        alias="secretData",
        description="Data only authenticated users may see",
    )
    timestamp: str = Field(
        description="ISO timestamp of the response"
    )


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = Field(
        description="Human readable outcome",
        default="Logged out successfully",
    )


class StatusResponse(BaseModel):
    status: str = "ok"


class HealthResponse(BaseModel):
    status: str = Field(
        description="'healthy' when the session store answers, 'degraded' otherwise"
    )
    session_store: bool = Field(
        description="Whether the session store answered a ping"
    )
