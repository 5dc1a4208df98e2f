"""
Token issue, verification, rotation and revocation
"""

import pytest
from jose import jwt

from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.services.auth import AuthService
from app.services.token_service import ACCESS, REFRESH, TokenService


async def test_access_token_carries_public_identity(make_user, token_service, settings):
    user = await make_user("alice")

    token = token_service.issue_access_token(user)
    payload = jwt.decode(token, settings.access_token_secret, algorithms=[settings.algorithm])

    assert payload["sub"] == str(user.id)
    assert payload["email"] == "alice@example.com"
    assert payload["username"] == "alice"
    assert payload["fullname"] == "Alice"
    assert payload["type"] == ACCESS


async def test_refresh_token_carries_only_user_id(make_user, token_service, settings):
    user = await make_user()

    token = token_service.issue_refresh_token(user)
    payload = jwt.decode(token, settings.refresh_token_secret, algorithms=[settings.algorithm])

    assert payload["sub"] == str(user.id)
    assert payload["type"] == REFRESH
    assert "email" not in payload
    assert "username" not in payload


async def test_verify_round_trip(make_user, token_service):
    user = await make_user()

    claims = token_service.verify(token_service.issue_access_token(user), ACCESS)

    assert claims.sub == user.id
    assert claims.username == user.username


async def test_verify_rejects_wrong_kind(make_user, token_service):
    user = await make_user()

    with pytest.raises(UnauthorizedError):
        token_service.verify(token_service.issue_access_token(user), REFRESH)
    with pytest.raises(UnauthorizedError):
        token_service.verify(token_service.issue_refresh_token(user), ACCESS)


async def test_verify_rejects_expired_token(make_user, db_session, settings):
    user = await make_user()
    expired = TokenService(db_session, settings.model_copy(update={"access_token_expire_minutes": -5}))

    with pytest.raises(UnauthorizedError):
        expired.verify(expired.issue_access_token(user), ACCESS)


async def test_verify_rejects_garbage(token_service):
    with pytest.raises(UnauthorizedError):
        token_service.verify("not-a-jwt", ACCESS)


async def test_tokens_issued_back_to_back_differ(make_user, token_service):
    user = await make_user()

    assert token_service.issue_refresh_token(user) != token_service.issue_refresh_token(user)


async def test_rotate_stores_refresh_token(make_user, token_service, db_session):
    user = await make_user()

    tokens = await token_service.rotate_tokens(user)

    stored = await AuthService.get_user_by_id(db_session, user.id)
    assert stored.refresh_token == tokens.refresh_token


async def test_refresh_rotates_and_old_token_is_rejected(make_user, token_service, db_session):
    user = await make_user()
    first = await token_service.rotate_tokens(user)

    second = await token_service.refresh(first.refresh_token)
    assert second.refresh_token != first.refresh_token

    stored = await AuthService.get_user_by_id(db_session, user.id)
    assert stored.refresh_token == second.refresh_token

    with pytest.raises(ForbiddenError):
        await token_service.refresh(first.refresh_token)

    # The newest token still works
    third = await token_service.refresh(second.refresh_token)
    assert third.refresh_token != second.refresh_token


async def test_reuse_of_old_token_does_not_clear_current(make_user, token_service, db_session):
    user = await make_user()
    first = await token_service.rotate_tokens(user)
    second = await token_service.refresh(first.refresh_token)

    with pytest.raises(ForbiddenError):
        await token_service.refresh(first.refresh_token)

    stored = await AuthService.get_user_by_id(db_session, user.id)
    assert stored.refresh_token == second.refresh_token


async def test_revoke_invalidates_outstanding_refresh_token(make_user, token_service):
    user = await make_user()
    tokens = await token_service.rotate_tokens(user)

    await token_service.revoke(user)

    with pytest.raises(ForbiddenError):
        await token_service.refresh(tokens.refresh_token)


async def test_refresh_for_deleted_user_is_unauthorized(make_user, token_service, db_session):
    user = await make_user()
    tokens = await token_service.rotate_tokens(user)

    await db_session.delete(user)
    await db_session.commit()

    with pytest.raises(UnauthorizedError):
        await token_service.refresh(tokens.refresh_token)


async def test_refresh_rejects_access_token(make_user, token_service):
    user = await make_user()
    tokens = await token_service.rotate_tokens(user)

    with pytest.raises(UnauthorizedError):
        await token_service.refresh(tokens.access_token)
