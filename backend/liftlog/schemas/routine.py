from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field, StringConstraints

from liftlog.models.enums import Visibility
from liftlog.schemas.workout_set import ExerciseBrief

Prescription = Annotated[str, StringConstraints(strip_whitespace=True, max_length=40)]

class RoutineExerciseCreate(BaseModel):
    exercise_id: int | None = None
    custom_exercise_name: Annotated[str, Field(max_length=200)] | None = None
    day_index: Annotated[int, Field(ge=0, le=6)] = 0
    order_index: Annotated[int, Field(ge=0)] | None = None
    sets: Prescription | None = None
    reps: Prescription | None = None
    rest_seconds: Annotated[int, Field(ge=0, le=3600)] | None = None
    notes: Annotated[str, Field(max_length=1000)] | None = None

class RoutineCreate(BaseModel):
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    description: Annotated[str, Field(max_length=2000)] | None = None
    visibility: Visibility = Visibility.private
    exercises: list[RoutineExerciseCreate] = []

class RoutineExerciseRead(BaseModel):
    id: int
    routine_id: int
    exercise_id: int | None = None
    custom_exercise_name: str | None = None
    day_index: int
    order_index: int
    sets: str | None = None
    reps: str | None = None
    rest_seconds: int | None = None
    notes: str | None = None
    exercise: ExerciseBrief | None = None

    model_config = {"from_attributes": True}

class RoutineRead(BaseModel):
    id: int
    author_id: int
    title: str
    description: str | None = None
    visibility: Visibility
    created_at: datetime
    routine_exercises: list[RoutineExerciseRead] = []

    model_config = {"from_attributes": True}
