from __future__ import annotations
from typing import Iterable

from liftlog.models import RoutineExercise, Workout, WorkoutSet, exercise_key
from liftlog.schemas.workout import ExerciseGroup, SetSummary, WorkoutDetail, WorkoutRead

UNORDERED = 999  # exercises added during the session go after the planned ones


def routine_order(routine_exercises: Iterable[RoutineExercise]) -> dict[str, int]:
    """Position of each exercise-identity in canonical routine order (first occurrence wins)."""
    order: dict[str, int] = {}
    for pos, slot in enumerate(routine_exercises):
        order.setdefault(exercise_key(slot.exercise_id, slot.custom_exercise_name), pos)
    return order


def group_sets(sets: Iterable[WorkoutSet], order: dict[str, int]) -> list[ExerciseGroup]:
    groups: dict[str, ExerciseGroup] = {}
    first_id: dict[str, int] = {}
    for s in sets:
        key = s.exercise_key
        if key not in groups:
            groups[key] = ExerciseGroup(
                exercise_id=s.exercise_id,
                exercise_name=s.exercise_name,
                is_custom=s.exercise_id is None,
                order_index=order.get(key, UNORDERED),
                sets=[],
            )
            first_id[key] = s.id
        groups[key].sets.append(SetSummary.model_validate(s))
        first_id[key] = min(first_id[key], s.id)

    for group in groups.values():
        group.sets.sort(key=lambda x: x.set_number)
    keys = sorted(groups, key=lambda k: (groups[k].order_index, first_id[k]))
    return [groups[k] for k in keys]


def workout_detail(workout: Workout, sets: Iterable[WorkoutSet],
                   routine_exercises: Iterable[RoutineExercise] = ()) -> WorkoutDetail:
    base = WorkoutRead.model_validate(workout).model_dump()
    return WorkoutDetail(**base, exercises=group_sets(sets, routine_order(routine_exercises)))
