"""Pydantic schemas for workout templates (manual builder or accepted AI plan)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TemplateExerciseIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    exercise_id: int
    sets: int = Field(..., ge=1, le=20)
    reps: int = Field(..., ge=1, le=200)
    rest_time: int = Field(60, ge=0, le=900, description="Seconds")
    notes: str | None = None


class WorkoutTemplateCreate(BaseModel):
    """Body for creating a template. Exercise order is the list order."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    source: str = Field("manual", pattern="^(manual|ai)$")
    exercises: list[TemplateExerciseIn] = Field(..., min_length=1)


class TemplateExerciseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    exercise_id: int
    order: int
    sets: int
    reps: int
    rest_time: int
    notes: str | None


class WorkoutTemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    source: str
    created_at: datetime | None
    exercises: list[TemplateExerciseOut]
