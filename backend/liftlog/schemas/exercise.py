from pydantic import BaseModel

class ExerciseRead(BaseModel):
    id: int
    name: str
    category: str | None = None
    equipment: str | None = None
    primary_muscles: list[str] = []
    secondary_muscles: list[str] = []

    model_config = {"from_attributes": True}

class ExercisePage(BaseModel):
    exercises: list[ExerciseRead]
    total: int
