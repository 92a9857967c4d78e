"""Tests for the active-workout client view against the real API (ASGI transport)."""

from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.client.session_view import ActiveWorkoutView, ApiError, ExerciseNotStartedError, WorkoutFinishedError
from app.main import app


class FakeClock:
    def __init__(self):
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now


@pytest_asyncio.fixture
async def user_http(ensure_db, auth_headers):
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=auth_headers,
    ) as ac:
        yield ac


@pytest.mark.asyncio
async def test_full_workout_flow(user_http: AsyncClient, scheduled_workout, exercises):
    ex1, ex2 = exercises
    clock = FakeClock()
    view = ActiveWorkoutView(user_http, scheduled_workout, clock=clock)
    await view.load()

    assert [p.exercise_id for p in view.plan] == [ex1, ex2]
    assert view.cursor.exercise_index == 0
    assert view.needs_exercise_start
    with pytest.raises(ExerciseNotStartedError):
        await view.log_set(10, 60)

    await view.start_current_exercise()
    assert not view.needs_exercise_start
    first = await view.log_set(10, 60)
    assert first["set_number"] == 1
    second = await view.log_set(8, 60)
    assert second["set_number"] == 2

    assert view.cursor.exercise_index == 1
    assert view.cursor.planned.exercise_id == ex2
    assert view.needs_exercise_start
    await view.start_current_exercise()

    clock.now += 25 * 60 + 30
    await view.log_set(12)

    assert view.is_done
    assert view.cursor is None
    assert view.session["completed"] is True
    assert view.session["duration"] == 25
    assert [len(e["sets"]) for e in view.session["exercises"]] == [2, 1]

    with pytest.raises(WorkoutFinishedError):
        await view.log_set(5)


@pytest.mark.asyncio
async def test_load_and_finish_send_once(user_http: AsyncClient, scheduled_workout):
    view = ActiveWorkoutView(user_http, scheduled_workout, clock=FakeClock())
    with patch.object(user_http, "request", wraps=user_http.request) as request:
        await view.load()
        await view.load()
        assert request.call_count == 1

        await view.finish(notes="Cut short")
        await view.finish(notes="Cut short")
        assert request.call_count == 2
    assert view.session["completed"] is True
    assert view.session["notes"] == "Cut short"


@pytest.mark.asyncio
async def test_failed_load_can_be_retried(user_http: AsyncClient, scheduled_workout):
    view = ActiveWorkoutView(user_http, 999999)
    with pytest.raises(ApiError) as exc_info:
        await view.load()
    assert exc_info.value.status_code == 404
    assert view.session is None

    view.scheduled_workout_id = scheduled_workout
    session = await view.load()
    assert session is not None
    assert view.session["scheduled_workout_id"] == scheduled_workout


@pytest.mark.asyncio
async def test_reload_resumes_at_next_set(user_http: AsyncClient, scheduled_workout, exercises):
    ex1, _ = exercises
    first_view = ActiveWorkoutView(user_http, scheduled_workout)
    await first_view.load()
    await first_view.start_current_exercise()
    await first_view.log_set(10, 80)

    second_view = ActiveWorkoutView(user_http, scheduled_workout)
    await second_view.load()
    assert second_view.workout_log_id == first_view.workout_log_id
    cursor = second_view.cursor
    assert cursor.exercise_index == 0
    assert cursor.planned.exercise_id == ex1
    assert cursor.completed_sets == 1
    assert cursor.next_set_number == 2
    assert not second_view.needs_exercise_start


@pytest.mark.asyncio
async def test_correct_set_updates_local_state(user_http: AsyncClient, scheduled_workout, exercises):
    ex1, _ = exercises
    view = ActiveWorkoutView(user_http, scheduled_workout)
    await view.load()
    await view.start_current_exercise()
    logged_set = await view.log_set(10, 60)

    updated = await view.correct_set(logged_set["id"], reps=9, weight=62.5, completed=False)
    assert updated["reps"] == 9
    sets = view.logged_exercise(ex1)["sets"]
    assert len(sets) == 1
    assert sets[0]["weight"] == 62.5
    # uncompleted set no longer counts toward the planned sets
    assert view.cursor.completed_sets == 0


async def _log_everything(http: AsyncClient, scheduled_workout: int, exercises) -> int:
    """All planned sets recorded through the API, completion not sent."""
    ex1, ex2 = exercises
    start = (await http.post("/api/v1/workout-logs/start", json={"scheduledWorkoutId": scheduled_workout})).json()
    log_id = start["session"]["id"]
    for order, (exercise_id, reps_list) in enumerate(((ex1, (10, 9)), (ex2, (12,)))):
        logged = (
            await http.post(
                "/api/v1/workout-logs/exercise",
                json={"workoutLogId": log_id, "exerciseId": exercise_id, "order": order},
            )
        ).json()["logged_exercise"]
        for number, reps in enumerate(reps_list, start=1):
            resp = await http.post(
                "/api/v1/workout-logs/sets",
                json={"loggedExerciseId": logged["id"], "setNumber": number, "reps": reps},
            )
            assert resp.status_code == 200
    return log_id


@pytest.mark.asyncio
async def test_reload_after_last_set_completes(user_http: AsyncClient, scheduled_workout, exercises):
    log_id = await _log_everything(user_http, scheduled_workout, exercises)

    view = ActiveWorkoutView(user_http, scheduled_workout, clock=FakeClock())
    await view.load()
    assert view.is_done
    assert view.workout_log_id == log_id
    assert view.session["completed"] is True
    assert view.session["duration"] == 0


@pytest.mark.asyncio
async def test_reload_of_completed_workout_sends_nothing_more(user_http: AsyncClient, scheduled_workout, exercises):
    log_id = await _log_everything(user_http, scheduled_workout, exercises)
    resp = await user_http.post("/api/v1/workout-logs/complete", json={"workoutLogId": log_id, "duration": 50})
    assert resp.status_code == 200

    view = ActiveWorkoutView(user_http, scheduled_workout, clock=FakeClock())
    with patch.object(user_http, "request", wraps=user_http.request) as request:
        await view.load()
        await view.finish()
        assert request.call_count == 1
    assert view.is_done
    assert view.session["duration"] == 50
