from fastapi_sessions.backends.session_backend import BackendError


class InvalidToken(Exception):
    """The presented cookie value is malformed, unsigned or tampered with."""


class StoreUnavailable(BackendError):
    """The session store could not be reached or answered with an error."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Session store unavailable during {operation}")


class SessionDestroyFailure(Exception):
    """Server-side session record could not be removed during logout."""

    def __init__(self, session_id: str, cause: Exception):
        self.session_id = session_id
        self.cause = cause
        super().__init__(f"Failed to destroy session: {cause}")
