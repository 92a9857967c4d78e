"""Tests for auth: issued tokens scope the workout-log routes; bad or stale tokens get 401."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from jose import jwt
from sqlalchemy import delete

from app.config import settings
from app.db.session import async_session_maker
from app.models.user import User

START_URL = "/api/v1/workout-logs/start"


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _token(sub: str, *, expires_in: timedelta = timedelta(minutes=5), key: str | None = None) -> str:
    payload = {"sub": sub, "email": "x@test.com", "exp": datetime.now(timezone.utc) + expires_in}
    return jwt.encode(payload, key or settings.secret_key, algorithm=settings.jwt_algorithm)


@pytest.mark.asyncio
async def test_registered_token_is_scoped_to_its_user(client: AsyncClient, scheduled_workout):
    resp = await client.post(
        "/api/v1/auth/register",
        json={"email": "  Lifter@Test.com ", "password": "squat-day-1"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"]["email"] == "lifter@test.com"
    assert data["expires_in"] == settings.access_token_expire_minutes * 60
    token = data["access_token"]

    # fixture workout belongs to test@test.com
    resp = await client.post(START_URL, json={"scheduledWorkoutId": scheduled_workout}, headers=_bearer(token))
    assert resp.status_code == 403
    resp = await client.post(START_URL, json={"scheduledWorkoutId": 999999}, headers=_bearer(token))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_register_same_email_twice(client: AsyncClient, clean_db):
    body = {"email": "repeat@test.com", "password": "pw-123456"}
    assert (await client.post("/api/v1/auth/register", json=body)).status_code == 200
    resp = await client.post("/api/v1/auth/register", json={**body, "email": "REPEAT@test.com"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already registered"


@pytest.mark.asyncio
async def test_login_token_starts_own_workout(client: AsyncClient, test_user, scheduled_workout):
    user_id, _, _ = test_user
    resp = await client.post("/api/v1/auth/login", json={"email": "test@test.com", "password": "password123"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    me = await client.get("/api/v1/auth/me", headers=_bearer(token))
    assert me.json() == {"id": user_id, "email": "test@test.com"}
    resp = await client.post(START_URL, json={"scheduledWorkoutId": scheduled_workout}, headers=_bearer(token))
    assert resp.status_code == 200
    assert resp.json()["session"]["scheduled_workout_id"] == scheduled_workout


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email,password",
    [("test@test.com", "wrong"), ("nobody@test.com", "password123")],
)
async def test_login_rejected(client: AsyncClient, test_user, email, password):
    resp = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_expired_token(client: AsyncClient, test_user, scheduled_workout):
    user_id, _, _ = test_user
    token = _token(str(user_id), expires_in=timedelta(minutes=-1))
    resp = await client.post(START_URL, json={"scheduledWorkoutId": scheduled_workout}, headers=_bearer(token))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_token_signed_with_another_key(client: AsyncClient, test_user, scheduled_workout):
    user_id, _, _ = test_user
    token = _token(str(user_id), key="not-the-server-key")
    resp = await client.post(START_URL, json={"scheduledWorkoutId": scheduled_workout}, headers=_bearer(token))
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_with_non_numeric_subject(client: AsyncClient, clean_db):
    resp = await client.post(START_URL, json={"scheduledWorkoutId": 1}, headers=_bearer(_token("abc")))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


@pytest.mark.asyncio
async def test_token_of_deleted_user(client: AsyncClient, test_user):
    user_id, _, token = test_user
    async with async_session_maker() as session:
        await session.execute(delete(User).where(User.id == user_id))
        await session.commit()
    resp = await client.post(START_URL, json={"scheduledWorkoutId": 1}, headers=_bearer(token))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "User not found"


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, "Token abc", "Bearer "])
async def test_missing_or_malformed_authorization(client: AsyncClient, clean_db, header):
    headers = {"Authorization": header} if header is not None else {}
    resp = await client.post(START_URL, json={"scheduledWorkoutId": 1}, headers=headers)
    assert resp.status_code == 401
    resp = await client.get("/api/v1/auth/me", headers=headers)
    assert resp.status_code == 401
