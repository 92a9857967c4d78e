"""Exercise catalog (read-only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.errors import NotFoundError
from app.db.session import get_db
from app.models.exercise import Exercise
from app.models.user import User
from app.schemas.exercise import ExerciseResponse
from app.schemas.pagination import PaginatedResponse

router = APIRouter(prefix="/exercises", tags=["exercises"])


@router.get(
    "",
    response_model=PaginatedResponse,
    summary="List exercises",
    responses={401: {"description": "Not authenticated"}},
)
async def list_exercises(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    body_part: str | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> PaginatedResponse:
    base = select(Exercise)
    if body_part:
        base = base.where(Exercise.body_part == body_part.lower())
    total = (await session.execute(select(func.count()).select_from(base.subquery()))).scalar() or 0
    r = await session.execute(base.order_by(Exercise.name.asc()).offset(offset).limit(limit))
    items = [ExerciseResponse.model_validate(e).model_dump() for e in r.scalars().all()]
    return PaginatedResponse(
        items=items,
        total=total,
        limit=limit,
        offset=offset,
        has_more=(offset + limit) < total,
    )


@router.get(
    "/{exercise_id}",
    response_model=ExerciseResponse,
    summary="Get exercise",
    responses={401: {"description": "Not authenticated"}, 404: {"description": "Not found"}},
)
async def get_exercise(
    session: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    exercise_id: Annotated[int, Path(ge=1)],
) -> ExerciseResponse:
    exercise = await session.get(Exercise, exercise_id)
    if exercise is None:
        raise NotFoundError("Exercise not found")
    return ExerciseResponse.model_validate(exercise)
