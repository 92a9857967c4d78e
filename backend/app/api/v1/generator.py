"""AI workout generation, gated per user by the per-minute and per-day generation quota."""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from app.api.deps import get_current_user
from app.core.quota import admit
from app.core.rate_limit import RateLimiter, get_generation_limiters
from app.models.user import User
from app.schemas.generator import (
    GeneratedWorkoutPlan,
    GenerationQuotaResponse,
    QuotaWindowOut,
    WorkoutGenerationRequest,
)
from app.services.gemini_workout import generate_workout_plan

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/generator", tags=["generator"])


@router.post(
    "/workout",
    response_model=GeneratedWorkoutPlan,
    summary="Generate a workout plan with AI",
    responses={
        401: {"description": "Not authenticated"},
        429: {"description": "Generation quota exceeded (see Retry-After)"},
        502: {"description": "AI service failed or returned an invalid plan"},
    },
)
async def generate_workout(
    response: Response,
    user: Annotated[User, Depends(get_current_user)],
    limiters: Annotated[list[RateLimiter], Depends(get_generation_limiters)],
    body: WorkoutGenerationRequest,
) -> GeneratedWorkoutPlan:
    """
    One generation is consumed per-minute window first, then per-day; the admitting
    window's rate-limit headers are echoed on the response. Runs after body validation,
    so a rejected body never spends quota.
    """
    decision = admit(str(user.id), limiters)
    decision.raise_for_denial()
    response.headers.update(decision.headers)
    plan = await generate_workout_plan(body)
    logger.info(
        "Generated workout '%s' for user %s (%d exercises)", plan.workout_name, user.id, len(plan.exercises)
    )
    return plan


@router.get(
    "/quota",
    response_model=GenerationQuotaResponse,
    summary="Remaining AI generations",
    responses={401: {"description": "Not authenticated"}},
)
async def get_generation_quota(
    user: Annotated[User, Depends(get_current_user)],
    limiters: Annotated[list[RateLimiter], Depends(get_generation_limiters)],
) -> GenerationQuotaResponse:
    windows = {}
    for limiter in limiters:
        result = limiter.peek(str(user.id))
        windows[limiter.name] = QuotaWindowOut(
            limit=result.limit,
            remaining=result.remaining,
            reset_at=datetime.fromtimestamp(result.reset_at, tz=timezone.utc).isoformat(),
        )
    return GenerationQuotaResponse(windows=windows)
