"""Workout templates API: create from the builder (or an accepted AI plan), list, get."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_current_user
from app.core.errors import NotFoundError
from app.db.session import get_db
from app.models.exercise import Exercise
from app.models.user import User
from app.models.workout_template import WorkoutTemplate, WorkoutTemplateExercise
from app.schemas.pagination import PaginatedResponse
from app.schemas.workout import WorkoutTemplateCreate, WorkoutTemplateResponse
from app.services.audit import log_action

router = APIRouter(prefix="/workouts", tags=["workouts"])


async def _load_template(session: AsyncSession, template_id: int, user_id: int) -> WorkoutTemplate:
    r = await session.execute(
        select(WorkoutTemplate)
        .where(WorkoutTemplate.id == template_id, WorkoutTemplate.user_id == user_id)
        .options(selectinload(WorkoutTemplate.exercises))
        .execution_options(populate_existing=True)
    )
    template = r.scalar_one_or_none()
    if template is None:
        raise NotFoundError("Workout template not found")
    return template


@router.get(
    "",
    response_model=PaginatedResponse,
    summary="List workout templates",
    responses={401: {"description": "Not authenticated"}},
)
async def list_templates(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> PaginatedResponse:
    """Newest first; exercises in template order."""
    base = select(WorkoutTemplate).where(WorkoutTemplate.user_id == user.id)
    total = (await session.execute(select(func.count()).select_from(base.subquery()))).scalar() or 0
    r = await session.execute(
        base.options(selectinload(WorkoutTemplate.exercises))
        .order_by(WorkoutTemplate.created_at.desc(), WorkoutTemplate.id.desc())
        .offset(offset)
        .limit(limit)
    )
    items = [WorkoutTemplateResponse.model_validate(t).model_dump(mode="json") for t in r.scalars().all()]
    return PaginatedResponse(
        items=items,
        total=total,
        limit=limit,
        offset=offset,
        has_more=(offset + limit) < total,
    )


@router.post(
    "",
    response_model=WorkoutTemplateResponse,
    status_code=201,
    summary="Create workout template",
    responses={401: {"description": "Not authenticated"}, 404: {"description": "Unknown exercise"}},
)
async def create_template(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    body: WorkoutTemplateCreate,
) -> WorkoutTemplateResponse:
    exercise_ids = {item.exercise_id for item in body.exercises}
    r = await session.execute(select(Exercise.id).where(Exercise.id.in_(exercise_ids)))
    missing = exercise_ids - {row[0] for row in r.all()}
    if missing:
        raise NotFoundError(f"Exercise not found: {', '.join(str(i) for i in sorted(missing))}")

    template = WorkoutTemplate(
        user_id=user.id,
        name=body.name,
        description=body.description,
        source=body.source,
        exercises=[
            WorkoutTemplateExercise(
                exercise_id=item.exercise_id,
                order=index,
                sets=item.sets,
                reps=item.reps,
                rest_time=item.rest_time,
                notes=item.notes,
            )
            for index, item in enumerate(body.exercises)
        ],
    )
    session.add(template)
    await session.flush()
    await log_action(
        session,
        user_id=user.id,
        action="create",
        resource="workout_template",
        resource_id=template.id,
        details={"source": body.source},
    )
    return WorkoutTemplateResponse.model_validate(await _load_template(session, template.id, user.id))


@router.get(
    "/{template_id}",
    response_model=WorkoutTemplateResponse,
    summary="Get workout template",
    responses={401: {"description": "Not authenticated"}, 404: {"description": "Not found"}},
)
async def get_template(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    template_id: Annotated[int, Path(ge=1)],
) -> WorkoutTemplateResponse:
    return WorkoutTemplateResponse.model_validate(await _load_template(session, template_id, user.id))
