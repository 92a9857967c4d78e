"""Pydantic schemas for the active-workout logging API."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Request bodies accept camelCase (web client) and snake_case field names
_REQUEST_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StartSessionRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    scheduled_workout_id: int


class StartExerciseRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    workout_log_id: int
    exercise_id: int
    order: int = Field(..., ge=0)
    notes: str | None = None


class RecordSetRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    logged_exercise_id: int
    set_number: int = Field(..., ge=1)
    reps: int = Field(..., ge=0)
    weight: float | None = Field(None, ge=0)


class UpdateSetRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    set_id: int
    reps: int = Field(..., ge=0)
    weight: float | None = Field(None, ge=0)
    completed: bool | None = None


class CompleteSessionRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    workout_log_id: int
    duration: int | None = Field(None, ge=0, description="Minutes")
    notes: str | None = None


class LoggedSetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    logged_exercise_id: int
    set_number: int
    reps: int
    weight: float | None
    completed: bool


class LoggedExerciseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    workout_log_id: int
    exercise_id: int
    order: int
    notes: str | None
    sets: list[LoggedSetResponse]


class WorkoutLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    template_id: int | None
    scheduled_workout_id: int | None
    name: str
    date: date
    completed: bool
    duration: int | None
    notes: str | None
    exercises: list[LoggedExerciseResponse]


class TemplateExerciseResponse(BaseModel):
    """Planned exercise as the active-workout screen needs it."""

    exercise_id: int
    exercise_name: str | None
    order: int
    sets: int
    reps: int
    rest_time: int
    notes: str | None


class StartSessionResponse(BaseModel):
    session: WorkoutLogResponse
    template_exercises: list[TemplateExerciseResponse]
    resumed: bool


class StartExerciseResponse(BaseModel):
    logged_exercise: LoggedExerciseResponse
    created: bool
    message: str
