import pytest
from fastapi import Response
from pydantic import ValidationError
from fastapi_sessions.backends.session_backend import BackendError
from unittest.mock import AsyncMock

from auth.errors import InvalidCredentials
from session.errors import StoreUnavailable
from session.manager import SessionLifecycleManager
from session.models import AnonymousSession, SessionContext, SessionState


async def login_juan(session_manager, previous=None):
    response = Response()
    context = await session_manager.login("juan", "123456", response, previous=previous)
    return context, response


def stored_keys(backend) -> list:
    return list(backend.data)


def cookie_value_from(response: Response) -> str:
    header = response.headers["set-cookie"]
    return header.split(";", 1)[0].split("=", 1)[1]


def test_ttl_must_be_positive(session_manager):
    with pytest.raises(ValueError):
        SessionLifecycleManager(
            codec=session_manager.codec,
            backend=session_manager.backend,
            directory=session_manager.directory,
            transport=session_manager.transport,
            ttl_seconds=0,
        )


@pytest.mark.asyncio
async def test_login_creates_session_and_sets_cookie(session_manager, memory_backend, clock):
    context, response = await login_juan(session_manager)

    assert context.state is SessionState.VALID
    assert context.username == "juan"
    assert context.user_id == "1"
    assert context.data.created_at == int(clock())
    assert context.data.expires_at == int(clock()) + 3600

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("connect.sid=")
    assert "httponly" in set_cookie.lower()
    assert "samesite=lax" in set_cookie.lower()

    assert memory_backend.ttl(context.session_id) == 3600
    assert session_manager.codec.verify(cookie_value_from(response)) == context.session_id


@pytest.mark.asyncio
async def test_login_with_bad_credentials_stores_nothing(session_manager, memory_backend):
    response = Response()

    with pytest.raises(InvalidCredentials):
        await session_manager.login("juan", "wrong", response)

    assert memory_backend.data == {}
    assert "set-cookie" not in response.headers


@pytest.mark.asyncio
async def test_login_always_mints_a_fresh_id(session_manager, memory_backend):
    first, _ = await login_juan(session_manager)

    second, _ = await login_juan(session_manager, previous=first)

    assert second.session_id != first.session_id
    assert await memory_backend.read(first.session_id) is None
    assert await memory_backend.read(second.session_id) is not None


@pytest.mark.asyncio
async def test_login_ignores_failure_to_discard_previous_session(session_manager, memory_backend):
    first, _ = await login_juan(session_manager)
    memory_backend.delete = AsyncMock(side_effect=StoreUnavailable("session deletion"))

    second, _ = await login_juan(session_manager, previous=first)

    assert second.is_valid


@pytest.mark.asyncio
async def test_login_reports_store_outage(session_manager, memory_backend):
    memory_backend.create = AsyncMock(side_effect=StoreUnavailable("session creation"))
    response = Response()

    with pytest.raises(StoreUnavailable):
        await session_manager.login("juan", "123456", response)
    assert "set-cookie" not in response.headers


@pytest.mark.asyncio
async def test_login_wraps_other_backend_errors(session_manager, memory_backend):
    memory_backend.create = AsyncMock(side_effect=BackendError("weird"))

    with pytest.raises(StoreUnavailable):
        await session_manager.login("juan", "123456", Response())


@pytest.mark.asyncio
async def test_resolve_valid_cookie(session_manager):
    created, response = await login_juan(session_manager)

    context = await session_manager.resolve(cookie_value_from(response))

    assert context.state is SessionState.VALID
    assert context.session_id == created.session_id
    assert context.data == created.data


@pytest.mark.asyncio
@pytest.mark.parametrize("cookie_value, reason", [
    (None, "no_cookie"),
    ("", "no_cookie"),
    ("not-a-signed-value", "bad_signature"),
])
async def test_resolve_without_usable_cookie(session_manager, cookie_value, reason):
    context = await session_manager.resolve(cookie_value)

    assert context.state is SessionState.ABSENT
    assert context.reason == reason
    assert context.session_id is None


@pytest.mark.asyncio
async def test_resolve_after_expiry(session_manager, clock):
    _, response = await login_juan(session_manager)
    clock.advance(3600)

    context = await session_manager.resolve(cookie_value_from(response))

    assert context.state is SessionState.ABSENT
    assert context.reason == "not_found"


@pytest.mark.asyncio
async def test_resolve_fails_closed_when_store_is_down(session_manager, memory_backend):
    created, response = await login_juan(session_manager)
    memory_backend.read = AsyncMock(side_effect=StoreUnavailable("session read"))

    context = await session_manager.resolve(cookie_value_from(response))

    assert context.state is SessionState.ABSENT
    assert context.reason == "store_unavailable"
    assert context.session_id == created.session_id
    assert not context.authenticated


@pytest.mark.asyncio
async def test_resolve_corrupt_record_is_invalid(session_manager, memory_backend):
    _, response = await login_juan(session_manager)
    memory_backend.read = AsyncMock(side_effect=BackendError("Corrupted session data"))

    context = await session_manager.resolve(cookie_value_from(response))

    assert context.state is SessionState.INVALID
    assert context.reason == "corrupt_record"
    assert not context.authenticated


@pytest.mark.asyncio
async def test_login_discards_corrupt_previous_record(session_manager, memory_backend):
    first, response = await login_juan(session_manager)
    memory_backend.read = AsyncMock(side_effect=BackendError("Corrupted session data"))
    corrupt = await session_manager.resolve(cookie_value_from(response))

    second, _ = await login_juan(session_manager, previous=corrupt)

    assert stored_keys(memory_backend) == [memory_backend.key_for(second.session_id)]


@pytest.mark.asyncio
async def test_logout_destroys_record_and_clears_cookie(session_manager, memory_backend):
    created, _ = await login_juan(session_manager)
    response = Response()

    result = await session_manager.logout(created, response)

    assert result.success and result.store_cleared
    assert await memory_backend.read(created.session_id) is None
    assert "max-age=0" in response.headers["set-cookie"].lower()


@pytest.mark.asyncio
async def test_logout_twice_is_fine(session_manager):
    created, _ = await login_juan(session_manager)
    await session_manager.logout(created, Response())

    result = await session_manager.logout(created, Response())

    assert result.success and result.store_cleared


@pytest.mark.asyncio
async def test_logout_without_session_clears_cookie(session_manager):
    response = Response()

    result = await session_manager.logout(SessionContext.absent(), response)

    assert result.success
    assert "set-cookie" in response.headers


@pytest.mark.asyncio
async def test_logout_reports_store_outage_as_retryable(session_manager, memory_backend):
    created, _ = await login_juan(session_manager)
    memory_backend.delete = AsyncMock(side_effect=StoreUnavailable("session deletion"))
    response = Response()

    result = await session_manager.logout(created, response)

    assert not result.success
    assert result.store_unavailable is True
    assert result.store_cleared is False
    assert result.cookie_cleared is True
    assert "max-age=0" in response.headers["set-cookie"].lower()


@pytest.mark.asyncio
async def test_logout_leaves_record_to_ttl_on_other_destroy_failures(session_manager, memory_backend):
    created, _ = await login_juan(session_manager)
    memory_backend.delete = AsyncMock(side_effect=RuntimeError("unexpected"))
    response = Response()

    result = await session_manager.logout(created, response)

    assert result.success
    assert result.store_unavailable is False
    assert result.store_cleared is False
    assert "max-age=0" in response.headers["set-cookie"].lower()


@pytest.mark.asyncio
async def test_corrupt_record_can_still_be_destroyed(session_manager, memory_backend):
    created, response = await login_juan(session_manager)
    memory_backend.read = AsyncMock(side_effect=BackendError("Corrupted session data"))

    context = await session_manager.resolve(cookie_value_from(response))
    assert context.session_id == created.session_id

    result = await session_manager.logout(context, Response())

    assert result.success and result.store_cleared
    assert memory_backend.data == {}


@pytest.mark.asyncio
async def test_mutate_writes_through_with_remaining_ttl(session_manager, memory_backend, clock):
    created, _ = await login_juan(session_manager)
    clock.advance(600)

    updated = await session_manager.mutate(created, lambda data: data.model_copy(update={"username": "juanito"}))

    assert updated.username == "juanito"
    assert (await memory_backend.read(created.session_id)).username == "juanito"
    assert memory_backend.ttl(created.session_id) == 3000
    assert updated.data.expires_at == created.data.expires_at


@pytest.mark.asyncio
async def test_mutate_rejects_invalid_result(session_manager, memory_backend):
    created, _ = await login_juan(session_manager)

    with pytest.raises(ValidationError):
        await session_manager.mutate(created, lambda data: data.model_copy(update={"username": ""}))

    assert (await memory_backend.read(created.session_id)).username == "juan"


@pytest.mark.asyncio
async def test_mutate_ignores_non_valid_contexts(session_manager, memory_backend):
    absent = SessionContext.absent()

    assert await session_manager.mutate(absent, lambda data: data) is absent
    assert memory_backend.data == {}


@pytest.mark.asyncio
async def test_mutate_skips_unchanged_data(session_manager, memory_backend):
    created, _ = await login_juan(session_manager)
    memory_backend.update = AsyncMock()

    result = await session_manager.mutate(created, lambda data: data)

    assert result is created
    memory_backend.update.assert_not_awaited()


@pytest.mark.asyncio
async def test_mutate_never_resurrects_expired_record(session_manager, memory_backend, clock):
    created, _ = await login_juan(session_manager)
    await memory_backend.delete(created.session_id)

    result = await session_manager.mutate(created, lambda data: data.model_copy(update={"username": "juanito"}))

    assert result.state is SessionState.ABSENT
    assert await memory_backend.read(created.session_id) is None


@pytest.mark.asyncio
async def test_refresh_is_noop_under_fixed_expiry(session_manager):
    created, _ = await login_juan(session_manager)

    assert await session_manager.refresh(created) is None


@pytest.mark.asyncio
async def test_refresh_renews_ttl_under_sliding_expiry(session_manager, memory_backend, clock):
    session_manager.sliding_expiration = True
    created, _ = await login_juan(session_manager)
    clock.advance(3000)

    cookie_value = await session_manager.refresh(created)

    assert session_manager.codec.verify(cookie_value) == created.session_id
    assert memory_backend.ttl(created.session_id) == 3600
    assert await session_manager.refresh(SessionContext.valid("gone", AnonymousSession(created_at=1, expires_at=2))) is None
