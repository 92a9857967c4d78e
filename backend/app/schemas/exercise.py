from pydantic import BaseModel, ConfigDict


class ExerciseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    body_part: str | None
    target: str | None
    equipment: str | None
    instructions: list | None
