import logging
from typing import Optional

from fastapi import Request, Response
from fastapi_sessions.frontends.implementations import CookieParameters

logger = logging.getLogger('session_auth.session.transport')


class SessionCookieTransport:
    """
    Moves the signed session token between the browser and the server.

    The server only ever reads the cookie from request headers and writes it
    through ``Set-Cookie``; what the cookie means is decided elsewhere.
    """

    def __init__(self, cookie_name: str, cookie_params: CookieParameters):
        self.cookie_name = cookie_name
        self.cookie_params = cookie_params

    def read(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.cookie_name)

    def _samesite(self) -> str:
        samesite = self.cookie_params.samesite
        return getattr(samesite, "value", samesite)

    def attach_to_response(self, response: Response, cookie_value: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=cookie_value,
            max_age=self.cookie_params.max_age,
            path=self.cookie_params.path,
            domain=self.cookie_params.domain,
            secure=self.cookie_params.secure,
            httponly=self.cookie_params.httponly,
            samesite=self._samesite(),
        )

    def delete_from_response(self, response: Response) -> None:
        # Attributes must match the issued cookie or browsers keep the old one
        response.delete_cookie(
            key=self.cookie_name,
            path=self.cookie_params.path,
            domain=self.cookie_params.domain,
            secure=self.cookie_params.secure,
            httponly=self.cookie_params.httponly,
            samesite=self._samesite(),
        )
