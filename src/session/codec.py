import logging
import secrets
from typing import Optional, Tuple

from itsdangerous import BadData, URLSafeTimedSerializer
from itsdangerous.encoding import base64_decode, base64_encode

from .errors import InvalidToken

logger = logging.getLogger('session_auth.session.codec')

# 32 random bytes -> 256 bits of entropy, url-safe base64 encoded
SESSION_ID_BYTES = 32


class SessionTokenCodec:
    """
    Mints session identifiers and binds them to a server secret.

    The cookie value is the session id signed with an HMAC by itsdangerous,
    salted with the cookie name the same way fastapi-sessions' SessionCookie
    does, so a value signed for one cookie is rejected for another.
    """

    def __init__(self, secret_key: str, *, salt: str, max_age: Optional[int] = None):
        if not secret_key:
            raise ValueError("A non-empty secret key is required to sign session cookies")
        self._signer = URLSafeTimedSerializer(secret_key, salt=salt)
        self.max_age = max_age

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(SESSION_ID_BYTES)

    def sign(self, session_id: str) -> str:
        return self._signer.dumps(session_id)

    def issue(self) -> Tuple[str, str]:
        """Return a fresh ``(session_id, cookie_value)`` pair."""
        session_id = self.new_session_id()
        return session_id, self.sign(session_id)

    def verify(self, cookie_value: Optional[str]) -> str:
        """
        Return the session id carried by ``cookie_value``.

        Raises:
            InvalidToken: for any malformed, unsigned, tampered or over-age value.
                The caller cannot tell which of these happened.
        """
        if not cookie_value:
            raise InvalidToken("empty token")
        try:
            session_id = self._signer.loads(cookie_value, max_age=self.max_age)
        except BadData as e:
            logger.debug(f"Rejected session cookie: {type(e).__name__}")
            raise InvalidToken("token failed verification") from None
        except (UnicodeError, ValueError, TypeError):
            raise InvalidToken("token failed verification") from None

        # itsdangerous ignores the spare low bits of the last base64 character,
        # so only the canonical encoding of the signature is accepted
        signature = cookie_value.rsplit(".", 1)[-1]
        if base64_encode(base64_decode(signature)) != signature.encode("ascii"):
            logger.debug("Rejected session cookie: non-canonical signature encoding")
            raise InvalidToken("token failed verification")

        if not isinstance(session_id, str) or not session_id:
            raise InvalidToken("token failed verification")
        return session_id
