"""Pytest configuration and shared fixtures for API tests."""

import os
import tempfile

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import delete

# Set test DB before app imports so config/engine use it
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "lift_log_test.db"),
)
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("API_RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("GOOGLE_GEMINI_API_KEY", "")

from app.core.auth import create_access_token, hash_password
from app.core.rate_limit import reset_generation_limiters
from app.db.base import Base
from app.db.session import async_session_maker, engine, init_db
from app.main import app
from app.models.exercise import Exercise
from app.models.scheduled_workout import ScheduledWorkout
from app.models.user import User
from app.models.workout_template import WorkoutTemplate, WorkoutTemplateExercise

pytest_plugins = ["pytest_asyncio"]


async def _clear_all():
    """Delete all rows in reverse dependency order so tests start clean."""
    async with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            await conn.execute(delete(table))


@pytest_asyncio.fixture
async def ensure_db():
    """Create tables; dispose the engine afterwards so no connection outlives the test's event loop."""
    await init_db()
    yield
    app.dependency_overrides.clear()
    reset_generation_limiters()
    await engine.dispose()


@pytest_asyncio.fixture
async def client(ensure_db):
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def clean_db(ensure_db):
    await _clear_all()
    yield


async def _create_user(email: str) -> tuple[int, str, str]:
    async with async_session_maker() as session:
        user = User(email=email, password_hash=hash_password("password123"))
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user.id, user.email, create_access_token(user.id, user.email)


@pytest_asyncio.fixture
async def test_user(clean_db, client):
    """Create a user via DB (committed) and return (user_id, email, access_token)."""
    return await _create_user("test@test.com")


@pytest_asyncio.fixture
async def other_user(clean_db, client):
    return await _create_user("other@test.com")


@pytest_asyncio.fixture
def auth_headers(test_user):
    _, __, token = test_user
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
def other_headers(other_user):
    _, __, token = other_user
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def exercises(clean_db):
    """Two catalog exercises: squat and push-up. Returns their ids."""
    async with async_session_maker() as session:
        squat = Exercise(name="Barbell Squat", body_part="legs", target="quads", equipment="barbell")
        push_up = Exercise(name="Push Up", body_part="chest", target="pectorals", equipment="body weight")
        session.add_all([squat, push_up])
        await session.commit()
        return squat.id, push_up.id


@pytest_asyncio.fixture
async def scheduled_workout(test_user, exercises):
    """Template [(ex1, 2x10), (ex2, 1x12)] scheduled for 2026-03-02 for test_user. Returns scheduled id."""
    from datetime import date

    user_id, _, _ = test_user
    ex1, ex2 = exercises
    async with async_session_maker() as session:
        template = WorkoutTemplate(
            user_id=user_id,
            name="Full Body Strength",
            exercises=[
                WorkoutTemplateExercise(exercise_id=ex1, order=0, sets=2, reps=10, rest_time=90, notes="Depth"),
                WorkoutTemplateExercise(exercise_id=ex2, order=1, sets=1, reps=12, rest_time=60),
            ],
        )
        session.add(template)
        await session.flush()
        scheduled = ScheduledWorkout(
            user_id=user_id,
            template_id=template.id,
            scheduled_date=date(2026, 3, 2),
            completed=False,
        )
        session.add(scheduled)
        await session.commit()
        return scheduled.id
