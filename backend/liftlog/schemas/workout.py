from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field, StringConstraints

from liftlog.models.enums import Visibility

TitleStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]

class WorkoutCreate(BaseModel):
    routine_id: int | None = None
    title: TitleStr | None = None
    visibility: Visibility | None = None
    day_index: Annotated[int, Field(ge=0)] | None = None

class WorkoutUpdate(BaseModel):
    title: TitleStr | None = None
    visibility: Visibility | None = None
    finished_at: datetime | None = None

class RoutineRef(BaseModel):
    id: int
    title: str

    model_config = {"from_attributes": True}

class WorkoutRead(BaseModel):
    id: int
    user_id: int
    routine_id: int | None = None
    title: str | None = None
    visibility: Visibility
    started_at: datetime
    finished_at: datetime | None = None
    routine: RoutineRef | None = None

    model_config = {"from_attributes": True}

class WorkoutPage(BaseModel):
    workouts: list[WorkoutRead]
    total: int

class SetSummary(BaseModel):
    id: int
    set_number: int
    reps: int | None = None
    weight_kg: float | None = None
    rpe: float | None = None
    notes: str | None = None
    completed: bool

    model_config = {"from_attributes": True}

class ExerciseGroup(BaseModel):
    exercise_id: int | None = None
    exercise_name: str
    is_custom: bool
    order_index: int
    sets: list[SetSummary]

class WorkoutDetail(WorkoutRead):
    """A workout with its sets grouped by exercise, in session order."""
    exercises: list[ExerciseGroup] = []
