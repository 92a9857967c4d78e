"""Workout logs API: start a scheduled workout, activate exercises, record/correct sets, complete."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.models.workout_template import WorkoutTemplateExercise
from app.schemas.workout_log import (
    CompleteSessionRequest,
    LoggedExerciseResponse,
    LoggedSetResponse,
    RecordSetRequest,
    StartExerciseRequest,
    StartExerciseResponse,
    StartSessionRequest,
    StartSessionResponse,
    TemplateExerciseResponse,
    UpdateSetRequest,
    WorkoutLogResponse,
)
from app.services import workout_session

router = APIRouter(prefix="/workout-logs", tags=["workout-logs"])

_OWNERSHIP_RESPONSES = {
    401: {"description": "Not authenticated"},
    403: {"description": "Owned by another user"},
    404: {"description": "Not found"},
}


def _template_exercise_to_response(row: WorkoutTemplateExercise) -> TemplateExerciseResponse:
    return TemplateExerciseResponse(
        exercise_id=row.exercise_id,
        exercise_name=row.exercise.name if row.exercise else None,
        order=row.order,
        sets=row.sets,
        reps=row.reps,
        rest_time=row.rest_time,
        notes=row.notes,
    )


@router.post(
    "/start",
    response_model=StartSessionResponse,
    summary="Start (or resume) a scheduled workout",
    responses=_OWNERSHIP_RESPONSES,
)
async def start_workout(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    body: StartSessionRequest,
) -> StartSessionResponse:
    """Creates the workout log on first call; later calls return the same log with what was logged so far."""
    log, template_exercises, created = await workout_session.start_session(
        session, body.scheduled_workout_id, user.id
    )
    return StartSessionResponse(
        session=WorkoutLogResponse.model_validate(log),
        template_exercises=[_template_exercise_to_response(te) for te in template_exercises],
        resumed=not created,
    )


@router.post(
    "/exercise",
    response_model=StartExerciseResponse,
    summary="Start an exercise in the workout log",
    responses=_OWNERSHIP_RESPONSES,
)
async def start_exercise(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    body: StartExerciseRequest,
) -> StartExerciseResponse:
    logged, created = await workout_session.start_exercise(
        session, body.workout_log_id, body.exercise_id, body.order, body.notes, user.id
    )
    return StartExerciseResponse(
        logged_exercise=LoggedExerciseResponse.model_validate(logged),
        created=created,
        message="Exercise started successfully" if created else "Exercise already started",
    )


@router.post(
    "/sets",
    response_model=LoggedSetResponse,
    summary="Record the next set",
    responses={**_OWNERSHIP_RESPONSES, 409: {"description": "Set number out of sequence"}},
)
async def record_set(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    body: RecordSetRequest,
) -> LoggedSetResponse:
    logged_set = await workout_session.record_set(
        session, body.logged_exercise_id, body.set_number, body.reps, body.weight, user.id
    )
    return LoggedSetResponse.model_validate(logged_set)


@router.patch(
    "/sets",
    response_model=LoggedSetResponse,
    summary="Correct a recorded set",
    responses=_OWNERSHIP_RESPONSES,
)
async def update_set(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    body: UpdateSetRequest,
) -> LoggedSetResponse:
    logged_set = await workout_session.update_set(
        session, body.set_id, body.reps, body.weight, body.completed, user.id
    )
    return LoggedSetResponse.model_validate(logged_set)


@router.post(
    "/complete",
    response_model=WorkoutLogResponse,
    summary="Complete the workout",
    responses=_OWNERSHIP_RESPONSES,
)
async def complete_workout(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    body: CompleteSessionRequest,
) -> WorkoutLogResponse:
    """Marks the log completed (and its scheduled workout, best effort)."""
    log = await workout_session.complete_session(
        session, body.workout_log_id, body.duration, body.notes, user.id
    )
    return WorkoutLogResponse.model_validate(log)


@router.get(
    "/{workout_log_id}",
    response_model=WorkoutLogResponse,
    summary="Get a workout log",
    responses=_OWNERSHIP_RESPONSES,
)
async def get_workout_log(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    workout_log_id: Annotated[int, Path(ge=1)],
) -> WorkoutLogResponse:
    log = await workout_session.get_session(session, workout_log_id, user.id)
    return WorkoutLogResponse.model_validate(log)
