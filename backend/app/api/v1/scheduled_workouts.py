"""Scheduled workouts API: put a template on the calendar (one per day), list a range, remove."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_current_user
from app.core.errors import ConflictError, NotFoundError
from app.db.session import get_db
from app.models.scheduled_workout import ScheduledWorkout
from app.models.user import User
from app.models.workout_template import WorkoutTemplate
from app.schemas.scheduled_workout import ScheduleWorkoutRequest, ScheduledWorkoutResponse
from app.services.audit import log_action

router = APIRouter(prefix="/scheduled-workouts", tags=["scheduled-workouts"])

ALREADY_SCHEDULED_MESSAGE = "A workout is already scheduled for this date"


def _row_to_response(row: ScheduledWorkout) -> ScheduledWorkoutResponse:
    return ScheduledWorkoutResponse(
        id=row.id,
        template_id=row.template_id,
        template_name=row.template.name if row.template else None,
        scheduled_date=row.scheduled_date,
        completed=row.completed,
        workout_log_id=row.workout_log.id if row.workout_log else None,
    )


def _with_relations():
    return (
        selectinload(ScheduledWorkout.template),
        selectinload(ScheduledWorkout.workout_log),
    )


@router.get(
    "",
    response_model=list[ScheduledWorkoutResponse],
    summary="List scheduled workouts in a date range",
    responses={401: {"description": "Not authenticated"}},
)
async def list_scheduled_workouts(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    start_date: Annotated[date, Query()],
    end_date: Annotated[date, Query()],
) -> list[ScheduledWorkoutResponse]:
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")
    r = await session.execute(
        select(ScheduledWorkout)
        .where(
            ScheduledWorkout.user_id == user.id,
            ScheduledWorkout.scheduled_date >= start_date,
            ScheduledWorkout.scheduled_date <= end_date,
        )
        .options(*_with_relations())
        .order_by(ScheduledWorkout.scheduled_date.asc())
    )
    return [_row_to_response(row) for row in r.scalars().all()]


@router.post(
    "",
    response_model=ScheduledWorkoutResponse,
    status_code=201,
    summary="Schedule a workout template for a date",
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "Template not found"},
        409: {"description": "A workout is already scheduled for this date"},
    },
)
async def schedule_workout(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    body: ScheduleWorkoutRequest,
) -> ScheduledWorkoutResponse:
    r = await session.execute(
        select(WorkoutTemplate).where(
            WorkoutTemplate.id == body.template_id,
            WorkoutTemplate.user_id == user.id,
        )
    )
    if r.scalar_one_or_none() is None:
        raise NotFoundError("Workout template not found")

    row = ScheduledWorkout(
        user_id=user.id,
        template_id=body.template_id,
        scheduled_date=body.scheduled_date,
        completed=False,
    )
    # Unique (user_id, scheduled_date) decides; no read-then-write race
    try:
        async with session.begin_nested():
            session.add(row)
    except IntegrityError as e:
        raise ConflictError(ALREADY_SCHEDULED_MESSAGE) from e
    await log_action(
        session,
        user_id=user.id,
        action="create",
        resource="scheduled_workout",
        resource_id=row.id,
        details={"scheduled_date": body.scheduled_date.isoformat()},
    )
    r = await session.execute(
        select(ScheduledWorkout)
        .where(ScheduledWorkout.id == row.id)
        .options(*_with_relations())
        .execution_options(populate_existing=True)
    )
    return _row_to_response(r.scalar_one())


@router.delete(
    "/{scheduled_workout_id}",
    status_code=204,
    summary="Remove a scheduled workout",
    responses={401: {"description": "Not authenticated"}, 404: {"description": "Not found"}},
)
async def delete_scheduled_workout(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    scheduled_workout_id: Annotated[int, Path(ge=1)],
) -> None:
    r = await session.execute(
        select(ScheduledWorkout).where(
            ScheduledWorkout.id == scheduled_workout_id,
            ScheduledWorkout.user_id == user.id,
        )
    )
    row = r.scalar_one_or_none()
    if row is None:
        raise NotFoundError("Scheduled workout not found")
    await session.delete(row)
    await log_action(
        session,
        user_id=user.id,
        action="delete",
        resource="scheduled_workout",
        resource_id=scheduled_workout_id,
    )
