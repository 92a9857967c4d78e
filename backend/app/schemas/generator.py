"""Schemas for AI workout generation (request to Gemini, plan returned by Gemini)."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExerciseReference(BaseModel):
    id: int
    name: str


class WorkoutGenerationRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    goal: str = Field(..., min_length=1, max_length=500)
    duration: int = Field(..., ge=5, le=300, description="Available time in minutes")
    target_muscles: list[str] = Field(default_factory=list)
    instructions: str | None = Field(None, max_length=1000)
    exercises: list[ExerciseReference] = Field(..., min_length=1, max_length=500)


class GeneratedExercise(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    exercise_id: int
    sets: int = Field(..., ge=1, le=20)
    reps: int = Field(..., ge=1, le=200)
    rest_time: int = Field(60, ge=0, le=900)
    notes: str | None = None


class GeneratedWorkoutPlan(BaseModel):
    """JSON object the model must return (camelCase keys, as in the prompt)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    workout_name: str
    workout_description: str | None = None
    exercises: list[GeneratedExercise]
    total_duration: int | None = None


class QuotaWindowOut(BaseModel):
    limit: int
    remaining: int
    reset_at: str


class GenerationQuotaResponse(BaseModel):
    windows: dict[str, QuotaWindowOut]
