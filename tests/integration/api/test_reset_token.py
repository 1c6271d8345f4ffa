"""
Integration tests for GET/POST /rest/forgot-password/{token}

- Token inspection and lazy expiry
- Single-use consumption
- Credential replacement
"""
import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

import bcrypt

ROUTE = "/rest/forgot-password"


async def request_token(client: AsyncClient, notifier, email: str = "a@x.com") -> str:
    response = await client.post(ROUTE, json={"email": email})
    assert response.status_code == 204
    return notifier.last_token


@pytest.mark.asyncio
async def test_token_lifecycle_with_expiry(
    client: AsyncClient, db_session: AsyncSession, create_user, notifier, clock
):
    """Valid, expired after the TTL, then unknown"""
    user = await create_user()
    token = await request_token(client, notifier)

    assert (await client.get(f"{ROUTE}/{token}")).status_code == 204

    clock.advance(seconds=3601)
    expired = await client.get(f"{ROUTE}/{token}")
    assert expired.status_code == 403
    assert expired.json() == {"error": "link expired", "code": "TOKEN_EXPIRED"}

    await db_session.refresh(user)
    assert user.reset_token is None
    assert user.reset_token_expires_at is None

    assert (await client.get(f"{ROUTE}/{token}")).status_code == 404


@pytest.mark.asyncio
async def test_malformed_token(client: AsyncClient):
    response = await client.get(f"{ROUTE}/not-a-token")

    assert response.status_code == 404
    assert response.json()["code"] == "TOKEN_NOT_FOUND"


@pytest.mark.asyncio
async def test_password_changed(
    client: AsyncClient, db_session: AsyncSession, create_user, notifier
):
    """New password verifies against the stored hash, the old one does not"""
    user = await create_user()
    token = await request_token(client, notifier)

    response = await client.post(f"{ROUTE}/{token}", json={"password": "newpass123"})

    assert response.status_code == 204
    await db_session.refresh(user)
    assert user.reset_token is None
    assert user.reset_token_expires_at is None
    assert bcrypt.checkpw(b"newpass123", user.password_hash.encode())
    assert not bcrypt.checkpw(b"OldPass123!", user.password_hash.encode())
    assert user.password_hash.startswith(user.password_salt)


@pytest.mark.asyncio
async def test_token_is_single_use(client: AsyncClient, create_user, notifier):
    await create_user()
    token = await request_token(client, notifier)

    first = await client.post(f"{ROUTE}/{token}", json={"password": "newpass123"})
    second = await client.post(f"{ROUTE}/{token}", json={"password": "otherpass123"})

    assert first.status_code == 204
    assert second.status_code == 404


@pytest.mark.asyncio
async def test_empty_password_keeps_token(
    client: AsyncClient, db_session: AsyncSession, create_user, notifier
):
    user = await create_user()
    token = await request_token(client, notifier)

    response = await client.post(f"{ROUTE}/{token}", json={"password": ""})

    assert response.status_code == 403
    assert response.json() == {"error": "Please enter a password", "code": "INVALID_CREDENTIAL"}
    await db_session.refresh(user)
    assert user.reset_token == token
    assert (await client.get(f"{ROUTE}/{token}")).status_code == 204


@pytest.mark.asyncio
async def test_expired_token_cannot_change_password(
    client: AsyncClient, db_session: AsyncSession, create_user, notifier, clock
):
    user = await create_user()
    old_hash = user.password_hash
    token = await request_token(client, notifier)

    clock.advance(hours=2)
    response = await client.post(f"{ROUTE}/{token}", json={"password": "newpass123"})

    assert response.status_code == 403
    await db_session.refresh(user)
    assert user.password_hash == old_hash
    assert user.reset_token is None


@pytest.mark.asyncio
async def test_legacy_cost_factor_is_kept(
    client: AsyncClient, db_session: AsyncSession, create_user, notifier
):
    user = await create_user(password_rounds=5)
    token = await request_token(client, notifier)

    await client.post(f"{ROUTE}/{token}", json={"password": "newpass123"})

    await db_session.refresh(user)
    assert user.password_salt.startswith("$2b$05$")
