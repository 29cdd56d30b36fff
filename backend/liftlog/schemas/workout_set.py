from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

ExerciseName = Annotated[str, Field(max_length=200)]
PosInt = Annotated[int, Field(ge=1)]
NonNegInt = Annotated[int, Field(ge=0)]
Weight = Annotated[float, Field(ge=0, le=2000)]
Rpe = Annotated[float, Field(ge=1.0, le=10.0)]
NotesStr = Annotated[str, Field(max_length=1000)]

class SetCreate(BaseModel):
    # exactly one of exercise_id / custom_exercise_name; checked by the service
    exercise_id: int | None = None
    custom_exercise_name: ExerciseName | None = None
    custom_exercise_category: Annotated[str, Field(max_length=60)] | None = None
    custom_exercise_primary_muscles: list[str] | None = None
    set_number: PosInt | None = None
    reps: NonNegInt | None = None
    weight_kg: Weight | None = None
    rpe: Rpe | None = None
    duration_sec: NonNegInt | None = None
    notes: NotesStr | None = None

    @field_validator("custom_exercise_name")
    @classmethod
    def name_non_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v2 = v.strip()
        if not v2:
            raise ValueError("custom exercise name cannot be blank")
        return v2

class SetUpdate(BaseModel):
    reps: NonNegInt | None = None
    weight_kg: Weight | None = None
    rpe: Rpe | None = None
    duration_sec: NonNegInt | None = None
    notes: NotesStr | None = None

class SetDeleteByExercise(BaseModel):
    exercise_id: int | None = None
    custom_exercise_name: ExerciseName | None = None
    set_number: PosInt

class ExerciseBrief(BaseModel):
    id: int
    name: str
    category: str | None = None
    primary_muscles: list[str] = []
    secondary_muscles: list[str] = []

    model_config = {"from_attributes": True}

class SetRead(BaseModel):
    id: int
    workout_id: int
    exercise_id: int | None = None
    custom_exercise_name: str | None = None
    custom_exercise_category: str | None = None
    custom_exercise_primary_muscles: list[str] = []
    set_number: int
    reps: int | None = None
    weight_kg: float | None = None
    rpe: float | None = None
    duration_sec: int | None = None
    notes: str | None = None
    performed_at: datetime | None = None
    completed: bool
    exercise: ExerciseBrief | None = None

    model_config = {"from_attributes": True}
