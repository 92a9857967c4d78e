from datetime import date

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ScheduleWorkoutRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    template_id: int
    scheduled_date: date


class ScheduledWorkoutResponse(BaseModel):
    id: int
    template_id: int
    template_name: str | None
    scheduled_date: date
    completed: bool
    workout_log_id: int | None
