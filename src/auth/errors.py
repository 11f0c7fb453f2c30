class InvalidCredentials(Exception):
    """Username/password pair did not match. Never says which field was wrong."""

    message = "Incorrect username or password"

    def __init__(self):
        super().__init__(self.message)


class Unauthorized(Exception):
    """Request denied by the authentication gate."""

    message = "Unauthorized. You must log in first."

    def __init__(self, reason: str = "not_authenticated"):
        # reason is for server logs only
        self.reason = reason
        super().__init__(self.message)
