# liftlog/services/materializer.py
"""
Turns a static routine into a concrete workout with empty (placeholder) sets.
"""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from liftlog.access import can_access
from liftlog.errors import NotFound
from liftlog.models import Visibility, exercise_key
from liftlog.repositories.routine_repo import RoutineRepository
from liftlog.repositories.set_repo import SetRepository
from liftlog.repositories.workout_repo import WorkoutRepository
from liftlog.schemas.workout import WorkoutDetail
from liftlog.services.grouping import workout_detail
from liftlog.services.prescription import placeholder_count
from liftlog.settings import Settings, get_settings

log = logging.getLogger(__name__)


class RoutineMaterializer:
    def __init__(self, db: Session, *, settings: Settings | None = None):
        self.routines = RoutineRepository(db)
        self.workouts = WorkoutRepository(db)
        self.sets = SetRepository(db)
        self.settings = settings or get_settings()

    def materialize(
        self,
        routine_id: int,
        user_id: int,
        *,
        day_index: int | None = None,
        title: str | None = None,
        visibility: Visibility | None = None,
    ) -> WorkoutDetail:
        routine = self.routines.get(routine_id)
        if routine is None or not can_access(user_id, routine.author_id, routine.visibility):
            log.warning("routine %s not visible to user %s", routine_id, user_id)
            raise NotFound("Routine not found or access denied")

        slots = self.routines.list_exercises(routine.id, day_index=day_index)
        workout = self.workouts.create(
            user_id,
            routine_id=routine.id,
            title=title,
            visibility=visibility or Visibility.private,
        )

        # the same exercise may be planned twice; keep numbering unique per identity
        numbered: dict[str, int] = {}
        created = 0
        for slot in slots:
            if slot.exercise_id is None and not slot.custom_exercise_name:
                continue
            key = exercise_key(slot.exercise_id, slot.custom_exercise_name)
            count = placeholder_count(slot.sets, self.settings.DEFAULT_PLACEHOLDER_SETS)
            start = numbered.get(key, 0)
            for set_number in range(start + 1, start + count + 1):
                self.sets.create(
                    workout.id,
                    key=key,
                    set_number=set_number,
                    exercise_id=slot.exercise_id,
                    custom_exercise_name=None if slot.exercise_id is not None else slot.custom_exercise_name,
                    notes=slot.notes,
                )
            numbered[key] = start + count
            created += count

        self.workouts.commit()
        log.info("Created workout %s for user %s from routine %s: %d exercises, %d sets",
                 workout.id, user_id, routine.id, len(slots), created)

        return workout_detail(
            workout,
            self.sets.list_by_workout(workout.id),
            self.routines.list_exercises(routine.id),
        )
