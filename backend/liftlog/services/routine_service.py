from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from liftlog.access import can_access, can_modify
from liftlog.errors import DuplicateRow, NotFound, PermissionDenied, ValidationError
from liftlog.models import Routine, RoutineExercise
from liftlog.repositories.exercise_repo import ExerciseRepository
from liftlog.repositories.routine_repo import RoutineRepository
from liftlog.schemas.routine import RoutineCreate, RoutineExerciseCreate

log = logging.getLogger(__name__)


class RoutineService:
    """Authoring side of routines: the templates workouts are materialized from."""

    def __init__(self, db: Session):
        self.routines = RoutineRepository(db)
        self.exercises = ExerciseRepository(db)

    def _authored(self, routine_id: int, author_id: int) -> Routine:
        routine = self.routines.get(routine_id)
        if routine is None:
            raise NotFound("Routine not found")
        if not can_modify(author_id, routine.author_id):
            raise PermissionDenied("You do not have permission to modify this routine")
        return routine

    def _validate_slot(self, payload: RoutineExerciseCreate) -> None:
        if payload.exercise_id is None and payload.custom_exercise_name is None:
            raise ValidationError("Either exercise_id or custom_exercise_name must be provided")
        if payload.exercise_id is not None and payload.custom_exercise_name is not None:
            raise ValidationError("Cannot provide both exercise_id and custom_exercise_name")
        if payload.custom_exercise_name is not None and not payload.custom_exercise_name.strip():
            raise ValidationError("Custom exercise name cannot be empty")
        if payload.exercise_id is not None and self.exercises.get(payload.exercise_id) is None:
            raise NotFound(f"Exercise with ID {payload.exercise_id} not found")

    def _free_order_index(self, routine_id: int, day_index: int, wanted: int | None) -> int:
        if wanted is not None and not self.routines.order_index_taken(routine_id, day_index, wanted):
            return wanted
        current_max = self.routines.max_order_index(routine_id, day_index)
        assigned = -1 if current_max is None else current_max
        assigned += 1
        if wanted is not None:
            log.info("order_index %s taken on day %s of routine %s; using %s",
                     wanted, day_index, routine_id, assigned)
        return assigned

    def _insert_slot(self, routine_id: int, payload: RoutineExerciseCreate) -> RoutineExercise:
        self._validate_slot(payload)
        return self.routines.add_exercise(
            routine_id,
            exercise_id=payload.exercise_id,
            custom_exercise_name=payload.custom_exercise_name.strip() if payload.custom_exercise_name else None,
            day_index=payload.day_index,
            order_index=self._free_order_index(routine_id, payload.day_index, payload.order_index),
            sets=payload.sets,
            reps=payload.reps,
            rest_seconds=payload.rest_seconds,
            notes=payload.notes,
        )

    def create_routine(self, author_id: int, payload: RoutineCreate) -> Routine:
        routine = self.routines.create(
            author_id, title=payload.title, description=payload.description, visibility=payload.visibility
        )
        for slot in payload.exercises:
            self._insert_slot(routine.id, slot)
        self.routines.commit()
        self.routines.db.refresh(routine)
        log.info("Created routine %s for user %s with %d exercises", routine.id, author_id, len(payload.exercises))
        return routine

    def get_routine(self, routine_id: int, user_id: int | None) -> Routine:
        routine = self.routines.get(routine_id)
        if routine is None or not can_access(user_id, routine.author_id, routine.visibility):
            raise NotFound("Routine not found")
        return routine

    def list_user_routines(self, author_id: int) -> list[Routine]:
        return self.routines.list_by_author(author_id)

    def add_exercise_to_routine(self, routine_id: int, author_id: int,
                                payload: RoutineExerciseCreate) -> RoutineExercise:
        self._authored(routine_id, author_id)
        try:
            slot = self._insert_slot(routine_id, payload)
            self.routines.commit()
        except DuplicateRow:
            log.info("order_index conflict on routine %s; retrying at the next free slot", routine_id)
            slot = self._insert_slot(routine_id, payload.model_copy(update={"order_index": None}))
            self.routines.commit()
        log.info("Added exercise slot %s to routine %s (day %s, order %s)",
                 slot.id, routine_id, slot.day_index, slot.order_index)
        return slot

    def remove_exercise_from_routine(self, routine_exercise_id: int, author_id: int) -> None:
        slot = self.routines.get_exercise(routine_exercise_id)
        if slot is None:
            raise NotFound("Exercise not found in routine")
        self._authored(slot.routine_id, author_id)
        self.routines.delete(slot)
        self.routines.commit()

    def delete_routine(self, routine_id: int, author_id: int) -> None:
        routine = self._authored(routine_id, author_id)
        self.routines.delete(routine)
        self.routines.commit()
        log.info("Deleted routine %s for user %s", routine_id, author_id)
