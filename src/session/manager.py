import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Response
from fastapi_sessions.backends.session_backend import BackendError

from auth.errors import InvalidCredentials
from auth.users import UserDirectory

from .backends.base import TTLSessionBackend
from .codec import SessionTokenCodec
from .errors import InvalidToken, SessionDestroyFailure, StoreUnavailable
from .models import AuthenticatedSession, SessionContext, SessionData, revalidate_session_data
from .transport import SessionCookieTransport

logger = logging.getLogger('session_auth.session.manager')

DEFAULT_SESSION_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class LogoutResult:
    store_cleared: bool
    cookie_cleared: bool
    store_unavailable: bool = False

    @property
    def success(self) -> bool:
        # A store outage is retryable; any other leftover record expires on its own
        return self.cookie_cleared and not self.store_unavailable


class SessionLifecycleManager:
    """
    Creates, resolves, mutates and destroys server-side sessions.

    Holds no per-session state of its own: the store is the single source of
    truth and the cookie is only a signed locator into it. Expiry is fixed
    from creation unless ``sliding_expiration`` is enabled, in which case
    every resolved request renews the store TTL and re-issues the cookie.
    """

    def __init__(
        self,
        *,
        codec: SessionTokenCodec,
        backend: TTLSessionBackend,
        directory: UserDirectory,
        transport: SessionCookieTransport,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        sliding_expiration: bool = False,
        clock: Callable[[], float] = time.time,
    ):
        if ttl_seconds <= 0:
            raise ValueError("Session TTL must be a positive number of seconds")
        self.codec = codec
        self.backend = backend
        self.directory = directory
        self.transport = transport
        self.ttl_seconds = ttl_seconds
        self.sliding_expiration = sliding_expiration
        self.clock = clock

    async def resolve(self, cookie_value: Optional[str]) -> SessionContext:
        """Turn the presented cookie into a SessionContext. Never raises."""
        if not cookie_value:
            return SessionContext.absent("no_cookie")

        try:
            session_id = self.codec.verify(cookie_value)
        except InvalidToken:
            logger.info("Session cookie failed verification, treating request as anonymous")
            return SessionContext.absent("bad_signature")

        try:
            data = await self.backend.load(session_id)
        except StoreUnavailable as e:
            logger.warning(f"Failing closed on session read: {e}")
            return SessionContext.absent("store_unavailable", session_id=session_id)
        except BackendError as e:
            logger.error(f"Stored session {session_id[:8]}... could not be used: {e}")
            return SessionContext.invalid("corrupt_record", session_id=session_id)

        if data is None:
            logger.debug(f"Session {session_id[:8]}... not found, expired or destroyed")
            return SessionContext.absent("not_found", session_id=session_id)

        return SessionContext.valid(session_id, data)

    async def refresh(self, context: SessionContext) -> Optional[str]:
        """
        Renew a valid session under sliding expiry.

        Returns the re-signed cookie value to send back, or None when nothing
        was renewed (fixed expiry, invalid context, or the store declined).
        """
        if not self.sliding_expiration or not context.is_valid:
            return None
        try:
            renewed = await self.backend.touch(context.session_id, self.ttl_seconds)
        except BackendError as e:
            logger.warning(f"Could not renew session TTL: {e}")
            return None
        if not renewed:
            return None
        return self.codec.sign(context.session_id)

    async def login(
        self,
        username: str,
        password: str,
        response: Response,
        previous: Optional[SessionContext] = None,
    ) -> SessionContext:
        """
        Authenticate and start a brand new session.

        A fresh id is always minted, whatever the client presented, so a
        pre-seeded id can never become an authenticated one.

        Raises:
            InvalidCredentials: nothing was stored and the cookie is untouched.
            StoreUnavailable: the session could not be persisted; retryable.
        """
        user = self.directory.authenticate(username, password)
        if user is None:
            logger.info(f"Login failed for username '{username}'")
            raise InvalidCredentials()

        session_id, cookie_value = self.codec.issue()
        now = int(self.clock())
        data = AuthenticatedSession(
            user_id=user.id,
            username=user.username,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )

        try:
            await self.backend.create(session_id, data, self.ttl_seconds)
        except StoreUnavailable:
            raise
        except BackendError as e:
            raise StoreUnavailable("session creation") from e

        if previous is not None and previous.session_id and previous.session_id != session_id:
            await self._discard_previous(previous.session_id)

        self.transport.attach_to_response(response, cookie_value)
        logger.info(f"Session {session_id[:8]}... created for user '{user.username}' (ttl={self.ttl_seconds}s)")
        return SessionContext.valid(session_id, data)

    async def _discard_previous(self, session_id: str) -> None:
        try:
            await self.backend.destroy(session_id)
            logger.debug(f"Replaced previous session {session_id[:8]}...")
        except BackendError as e:
            logger.warning(f"Previous session {session_id[:8]}... left to expire: {e}")

    async def mutate(
        self,
        context: SessionContext,
        fn: Callable[[SessionData], SessionData],
    ) -> SessionContext:
        """
        Apply ``fn`` to a valid session and write the result through.

        Contexts that are not valid come back unchanged. Unchanged data is not
        written. Raises StoreUnavailable if the write could not be performed.
        """
        if not context.is_valid:
            logger.debug(f"Ignoring mutation on {context.state.value} session")
            return context

        updated = fn(context.data)
        if updated == context.data:
            return context
        updated = revalidate_session_data(updated)

        now = self.clock()
        if self.sliding_expiration:
            ttl = self.ttl_seconds
            updated = updated.model_copy(update={"expires_at": int(now) + ttl})
        else:
            ttl = context.data.remaining_ttl(now)
            if ttl <= 0:
                return SessionContext.absent("expired", session_id=context.session_id)

        try:
            await self.backend.save(context.session_id, updated, ttl)
        except StoreUnavailable:
            raise
        except BackendError as e:
            logger.info(f"Session {context.session_id[:8]}... vanished before update: {e}")
            return SessionContext.absent("not_found", session_id=context.session_id)

        return SessionContext.valid(context.session_id, updated)

    async def logout(self, context: SessionContext, response: Response) -> LogoutResult:
        """
        Destroy the server-side record and clear the cookie.

        Both steps always run. An already missing record counts as destroyed,
        so logging out twice is fine. A store outage is reported on the result
        as retryable; the cookie is cleared regardless.
        """
        store_cleared = True
        store_unavailable = False
        if context.session_id:
            try:
                existed = await self.backend.destroy(context.session_id)
                if not existed:
                    logger.info(f"Session {context.session_id[:8]}... was already gone at logout")
            except StoreUnavailable as e:
                store_cleared = False
                store_unavailable = True
                logger.error(f"{SessionDestroyFailure(context.session_id, e)} (session {context.session_id[:8]}..., retryable)")
            except Exception as e:
                store_cleared = False
                failure = SessionDestroyFailure(context.session_id, e)
                logger.error(f"{failure} (session {context.session_id[:8]}... left for TTL cleanup)")

        cookie_cleared = True
        try:
            self.transport.delete_from_response(response)
        except Exception as e:
            cookie_cleared = False
            logger.error(f"Failed to clear session cookie: {e}", exc_info=True)

        if context.username:
            logger.info(f"User '{context.username}' logged out")
        return LogoutResult(
            store_cleared=store_cleared,
            cookie_cleared=cookie_cleared,
            store_unavailable=store_unavailable,
        )
