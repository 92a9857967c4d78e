"""
Active workout lifecycle: scheduled workout -> workout log -> logged exercises -> logged sets -> completed.

Start calls are idempotent. The unique constraints on workout_logs.scheduled_workout_id and
(workout_log_id, exercise_id) decide races: the insert runs in a SAVEPOINT and a losing
concurrent request re-reads and returns the winner's row.
Ownership: NotFoundError when the row is missing, ForbiddenError when it belongs to someone else.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import ConflictError, ForbiddenError, NotFoundError
from app.models.exercise import Exercise
from app.models.scheduled_workout import ScheduledWorkout
from app.models.workout_log import LoggedExercise, LoggedSet, WorkoutLog
from app.models.workout_template import WorkoutTemplate, WorkoutTemplateExercise
from app.services.audit import log_action

logger = logging.getLogger(__name__)


def _log_with_children():
    return selectinload(WorkoutLog.exercises).selectinload(LoggedExercise.sets)


async def _load_workout_log(session: AsyncSession, workout_log_id: int) -> WorkoutLog | None:
    r = await session.execute(
        select(WorkoutLog)
        .where(WorkoutLog.id == workout_log_id)
        .options(_log_with_children())
        .execution_options(populate_existing=True)
    )
    return r.scalar_one_or_none()


async def _find_log_for_scheduled(session: AsyncSession, scheduled_workout_id: int) -> WorkoutLog | None:
    r = await session.execute(
        select(WorkoutLog)
        .where(WorkoutLog.scheduled_workout_id == scheduled_workout_id)
        .options(_log_with_children())
        .execution_options(populate_existing=True)
    )
    return r.scalar_one_or_none()


async def _find_logged_exercise(
    session: AsyncSession, workout_log_id: int, exercise_id: int
) -> LoggedExercise | None:
    r = await session.execute(
        select(LoggedExercise)
        .where(
            LoggedExercise.workout_log_id == workout_log_id,
            LoggedExercise.exercise_id == exercise_id,
        )
        .options(selectinload(LoggedExercise.sets))
        .execution_options(populate_existing=True)
    )
    return r.scalar_one_or_none()


async def _owned_workout_log(session: AsyncSession, workout_log_id: int, user_id: int) -> WorkoutLog:
    log = await _load_workout_log(session, workout_log_id)
    if log is None:
        raise NotFoundError("Workout log not found")
    if log.user_id != user_id:
        raise ForbiddenError("Forbidden")
    return log


async def get_session(session: AsyncSession, workout_log_id: int, user_id: int) -> WorkoutLog:
    """Workout log with its logged exercises (by order) and sets (by set number)."""
    return await _owned_workout_log(session, workout_log_id, user_id)


async def start_session(
    session: AsyncSession,
    scheduled_workout_id: int,
    user_id: int,
) -> tuple[WorkoutLog, list[WorkoutTemplateExercise], bool]:
    """
    Start (or resume) the workout for a scheduled entry.
    Returns (workout_log, template_exercises, created). A second call for the same entry
    returns the already-linked log with everything logged so far.
    """
    r = await session.execute(
        select(ScheduledWorkout)
        .where(ScheduledWorkout.id == scheduled_workout_id)
        .options(
            selectinload(ScheduledWorkout.template)
            .selectinload(WorkoutTemplate.exercises)
            .selectinload(WorkoutTemplateExercise.exercise)
        )
    )
    scheduled = r.scalar_one_or_none()
    if scheduled is None:
        raise NotFoundError("Scheduled workout not found")
    if scheduled.user_id != user_id:
        raise ForbiddenError("Forbidden")
    template_exercises = list(scheduled.template.exercises)

    existing = await _find_log_for_scheduled(session, scheduled.id)
    if existing is not None:
        return existing, template_exercises, False

    log = WorkoutLog(
        user_id=user_id,
        template_id=scheduled.template_id,
        scheduled_workout_id=scheduled.id,
        name=scheduled.template.name,
        date=scheduled.scheduled_date,
        completed=False,
        exercises=[],
    )
    try:
        async with session.begin_nested():
            session.add(log)
    except IntegrityError:
        existing = await _find_log_for_scheduled(session, scheduled.id)
        if existing is None:
            raise
        logger.info("Concurrent start for scheduled workout %s; returning log %s", scheduled.id, existing.id)
        return existing, template_exercises, False

    await log_action(
        session,
        user_id=user_id,
        action="start",
        resource="workout_log",
        resource_id=log.id,
        details={"scheduled_workout_id": scheduled.id},
    )
    return log, template_exercises, True


async def start_exercise(
    session: AsyncSession,
    workout_log_id: int,
    exercise_id: int,
    order: int,
    notes: str | None,
    user_id: int,
) -> tuple[LoggedExercise, bool]:
    """Activate an exercise within a workout log. Returns (logged_exercise, created)."""
    log = await _owned_workout_log(session, workout_log_id, user_id)

    existing = await _find_logged_exercise(session, log.id, exercise_id)
    if existing is not None:
        return existing, False

    if await session.get(Exercise, exercise_id) is None:
        raise NotFoundError("Exercise not found")

    logged = LoggedExercise(
        workout_log_id=log.id,
        exercise_id=exercise_id,
        order=order,
        notes=notes,
        sets=[],
    )
    try:
        async with session.begin_nested():
            session.add(logged)
    except IntegrityError:
        existing = await _find_logged_exercise(session, log.id, exercise_id)
        if existing is None:
            raise
        return existing, False
    return logged, True


async def _owned_logged_exercise(
    session: AsyncSession, logged_exercise_id: int, user_id: int
) -> LoggedExercise:
    r = await session.execute(
        select(LoggedExercise)
        .where(LoggedExercise.id == logged_exercise_id)
        .options(selectinload(LoggedExercise.workout_log), selectinload(LoggedExercise.sets))
        .execution_options(populate_existing=True)
    )
    logged = r.scalar_one_or_none()
    if logged is None:
        raise NotFoundError("Logged exercise not found")
    if logged.workout_log.user_id != user_id:
        raise ForbiddenError("Forbidden")
    return logged


async def record_set(
    session: AsyncSession,
    logged_exercise_id: int,
    set_number: int,
    reps: int,
    weight: float | None,
    user_id: int,
) -> LoggedSet:
    """
    Append the next set of a logged exercise (completed=True).
    set_number must be the next one (count + 1). Re-sending an already recorded
    set_number is treated as a retry and overwrites that set's values.
    """
    logged = await _owned_logged_exercise(session, logged_exercise_id, user_id)

    for existing in logged.sets:
        if existing.set_number == set_number:
            existing.reps = reps
            existing.weight = weight
            existing.completed = True
            await session.flush()
            return existing

    next_number = len(logged.sets) + 1
    if set_number != next_number:
        raise ConflictError(f"Set {set_number} is out of sequence; next set is {next_number}")

    new_set = LoggedSet(
        logged_exercise_id=logged.id,
        set_number=set_number,
        reps=reps,
        weight=weight,
        completed=True,
    )
    try:
        async with session.begin_nested():
            session.add(new_set)
    except IntegrityError:
        # Concurrent write of the same set number: last write wins
        r = await session.execute(
            select(LoggedSet).where(
                LoggedSet.logged_exercise_id == logged.id,
                LoggedSet.set_number == set_number,
            )
        )
        winner = r.scalar_one()
        winner.reps = reps
        winner.weight = weight
        winner.completed = True
        await session.flush()
        return winner
    return new_set


async def update_set(
    session: AsyncSession,
    set_id: int,
    reps: int,
    weight: float | None,
    completed: bool | None,
    user_id: int,
) -> LoggedSet:
    """Correct a recorded set in place. completed defaults to True; weight kept when omitted."""
    r = await session.execute(
        select(LoggedSet)
        .where(LoggedSet.id == set_id)
        .options(selectinload(LoggedSet.logged_exercise).selectinload(LoggedExercise.workout_log))
    )
    logged_set = r.scalar_one_or_none()
    if logged_set is None:
        raise NotFoundError("Set not found")
    if logged_set.logged_exercise.workout_log.user_id != user_id:
        raise ForbiddenError("Forbidden")

    logged_set.reps = reps
    if weight is not None:
        logged_set.weight = weight
    logged_set.completed = True if completed is None else completed
    await session.flush()
    return logged_set


async def _mark_scheduled_completed(session: AsyncSession, scheduled_workout_id: int) -> None:
    await session.execute(
        update(ScheduledWorkout)
        .where(ScheduledWorkout.id == scheduled_workout_id)
        .values(completed=True)
    )


async def complete_session(
    session: AsyncSession,
    workout_log_id: int,
    duration: int | None,
    notes: str | None,
    user_id: int,
) -> WorkoutLog:
    """
    Mark the workout log completed, then (best effort) its scheduled workout.
    Repeated calls re-apply the same flags. A failure of the scheduled-workout write
    is logged and does not undo the completed log.
    """
    log = await _owned_workout_log(session, workout_log_id, user_id)
    log.completed = True
    if duration is not None:
        log.duration = duration
    if notes is not None:
        log.notes = notes
    await session.flush()

    if log.scheduled_workout_id is not None:
        try:
            async with session.begin_nested():
                await _mark_scheduled_completed(session, log.scheduled_workout_id)
        except SQLAlchemyError:
            logger.exception(
                "Workout log %s completed but scheduled workout %s could not be marked completed",
                log.id,
                log.scheduled_workout_id,
            )

    await log_action(
        session,
        user_id=user_id,
        action="complete",
        resource="workout_log",
        resource_id=log.id,
        details={"duration": log.duration},
    )
    return log
