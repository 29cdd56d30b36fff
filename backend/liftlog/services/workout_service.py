# liftlog/services/workout_service.py
"""
Workout and set lifecycle.

Every call takes the caller's user id and re-checks ownership through an
owner lookup: a missing workout/set raises ``NotFound``, somebody else's
raises ``PermissionDenied``. Private workouts of other users are reported as
``NotFound`` on reads since they are not visible at all.
"""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from liftlog.access import can_access
from liftlog.errors import DuplicateRow, NotFound, PermissionDenied, ValidationError
from liftlog.models import Visibility, Workout, WorkoutSet, exercise_key, is_completed
from liftlog.repositories.base import Page
from liftlog.repositories.exercise_repo import ExerciseRepository
from liftlog.repositories.routine_repo import RoutineRepository
from liftlog.repositories.set_repo import SetRepository
from liftlog.repositories.workout_repo import WorkoutRepository
from liftlog.schemas.workout import WorkoutCreate, WorkoutDetail, WorkoutUpdate
from liftlog.schemas.workout_set import SetCreate, SetDeleteByExercise, SetUpdate
from liftlog.services.grouping import workout_detail
from liftlog.services.materializer import RoutineMaterializer
from liftlog.services.prescription import MAX_PLACEHOLDER_SETS
from liftlog.settings import Settings, get_settings
from liftlog.timeutil import utcnow

log = logging.getLogger(__name__)

PERFORMANCE_FIELDS = ("reps", "weight_kg", "rpe", "duration_sec", "notes")


def exercise_identity(exercise_id: int | None, custom_exercise_name: str | None) -> str:
    """Validate the exercise reference of a set and return its grouping key."""
    if exercise_id is None and custom_exercise_name is None:
        raise ValidationError("Either exercise_id or custom_exercise_name must be provided")
    if exercise_id is not None and custom_exercise_name is not None:
        raise ValidationError("Cannot provide both exercise_id and custom_exercise_name")
    return exercise_key(exercise_id, custom_exercise_name)


class WorkoutService:
    def __init__(self, db: Session, *, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.workouts = WorkoutRepository(db)
        self.sets = SetRepository(db)
        self.exercises = ExerciseRepository(db)
        self.routines = RoutineRepository(db)

    # ownership
    def _owned_workout(self, workout_id: int, user_id: int) -> Workout:
        owner = self.workouts.owner_of(workout_id)
        if owner is None:
            raise NotFound("Workout not found")
        if owner != user_id:
            log.warning("user %s denied access to workout %s (owner %s)", user_id, workout_id, owner)
            raise PermissionDenied("Not allowed for this workout")
        return self.workouts.get(workout_id)

    def _owned_set(self, set_id: int, user_id: int) -> WorkoutSet:
        owner = self.sets.owner_of(set_id)
        if owner is None:
            raise NotFound("Workout set not found")
        if owner != user_id:
            log.warning("user %s denied access to set %s (owner %s)", user_id, set_id, owner)
            raise PermissionDenied("Not allowed for this set")
        return self.sets.get(set_id)

    def detail(self, workout: Workout) -> WorkoutDetail:
        routine_exercises = []
        if workout.routine_id is not None:
            routine_exercises = self.routines.list_exercises(workout.routine_id)
        return workout_detail(workout, self.sets.list_by_workout(workout.id), routine_exercises)

    # workouts
    def create_workout(self, user_id: int, payload: WorkoutCreate) -> WorkoutDetail:
        if payload.routine_id is not None:
            return RoutineMaterializer(self.db, settings=self.settings).materialize(
                payload.routine_id,
                user_id,
                day_index=payload.day_index,
                title=payload.title,
                visibility=payload.visibility,
            )
        workout = self.workouts.create(
            user_id, title=payload.title, visibility=payload.visibility or Visibility.private
        )
        self.workouts.commit()
        log.info("Created workout %s for user %s", workout.id, user_id)
        return self.detail(workout)

    def get_user_workouts(
        self,
        user_id: int,
        *,
        limit: int = 20,
        offset: int = 0,
        include_finished: bool = True,
        routine_id: int | None = None,
    ) -> Page[Workout]:
        return self.workouts.list_by_user(
            user_id, limit=limit, offset=offset,
            include_finished=include_finished, routine_id=routine_id,
        )

    def get_workout_by_id(self, workout_id: int, user_id: int | None) -> WorkoutDetail:
        workout = self.workouts.get(workout_id)
        if workout is None:
            raise NotFound("Workout not found")
        if not can_access(user_id, workout.user_id, workout.visibility):
            log.warning("workout %s is private; hidden from user %s", workout_id, user_id)
            raise NotFound("Workout not found")
        return self.detail(workout)

    def update_workout(self, workout_id: int, user_id: int, payload: WorkoutUpdate) -> Workout:
        workout = self._owned_workout(workout_id, user_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            if field == "visibility" and value is None:
                continue
            setattr(workout, field, value)
        self.workouts.commit()
        log.info("Updated workout %s for user %s", workout_id, user_id)
        return workout

    def delete_workout(self, workout_id: int, user_id: int) -> None:
        workout = self._owned_workout(workout_id, user_id)
        self.workouts.delete(workout)
        self.workouts.commit()
        log.info("Deleted workout %s for user %s", workout_id, user_id)

    def finish_workout(self, workout_id: int, user_id: int) -> Workout:
        # calling again simply re-stamps finished_at
        workout = self._owned_workout(workout_id, user_id)
        workout.finished_at = utcnow()
        self.workouts.commit()
        log.info("Finished workout %s for user %s", workout_id, user_id)
        return workout

    # sets
    def _set_target(self, workout_id: int, user_id: int, payload: SetCreate) -> str:
        self._owned_workout(workout_id, user_id)
        key = exercise_identity(payload.exercise_id, payload.custom_exercise_name)
        if payload.exercise_id is not None and self.exercises.get(payload.exercise_id) is None:
            raise NotFound("Exercise not found")
        return key

    def _new_set(self, workout_id: int, key: str, set_number: int, payload: SetCreate) -> WorkoutSet:
        performance = {f: getattr(payload, f) for f in PERFORMANCE_FIELDS if getattr(payload, f) is not None}
        custom = {}
        if payload.exercise_id is None:
            custom = {
                "custom_exercise_name": payload.custom_exercise_name,
                "custom_exercise_category": payload.custom_exercise_category,
                "custom_exercise_primary_muscles": list(payload.custom_exercise_primary_muscles or []),
            }
        done = is_completed(payload.reps, payload.weight_kg, payload.rpe)
        return self.sets.create(
            workout_id,
            key=key,
            set_number=set_number,
            exercise_id=payload.exercise_id,
            performed_at=utcnow() if done else None,
            **custom,
            **performance,
        )

    def add_set(self, workout_id: int, user_id: int, payload: SetCreate) -> WorkoutSet:
        try:
            return self._add_set(workout_id, user_id, payload)
        except DuplicateRow:
            # another writer took the number between our read and the insert
            log.info("set number conflict in workout %s; retrying at the next free slot", workout_id)
            return self._add_set(workout_id, user_id, payload.model_copy(update={"set_number": None}))

    def _add_set(self, workout_id: int, user_id: int, payload: SetCreate) -> WorkoutSet:
        log.debug("add_set workout=%s user=%s payload=%s", workout_id, user_id, payload)
        key = self._set_target(workout_id, user_id, payload)

        set_number = payload.set_number
        if set_number is not None:
            existing = self.sets.find(workout_id, key, set_number)
            if existing is not None and not existing.completed:
                # placeholder slot: log into it
                for field in PERFORMANCE_FIELDS:
                    value = getattr(payload, field)
                    if value is not None:
                        setattr(existing, field, value)
                if existing.completed:
                    existing.performed_at = utcnow()
                self.sets.commit()
                log.info("Logged set %s (#%s) in workout %s", existing.id, set_number, workout_id)
                return existing
            if existing is not None:
                log.info("set #%s of %s already logged in workout %s; appending", set_number, key, workout_id)
                set_number = None
        if set_number is None:
            set_number = self.sets.max_set_number(workout_id, key) + 1

        workout_set = self._new_set(workout_id, key, set_number, payload)
        self.sets.commit()
        log.info("Added workout set %s to workout %s", workout_set.id, workout_id)
        return workout_set

    def add_sets(self, workout_id: int, user_id: int, payload: SetCreate, count: int) -> list[WorkoutSet]:
        """Append ``count`` sets of one exercise in a single transaction."""
        if not 1 <= count <= MAX_PLACEHOLDER_SETS:
            raise ValidationError(f"count must be between 1 and {MAX_PLACEHOLDER_SETS}")
        try:
            return self._add_sets(workout_id, user_id, payload, count)
        except DuplicateRow:
            log.info("set number conflict in workout %s; renumbering %d new sets", workout_id, count)
            return self._add_sets(workout_id, user_id, payload, count)

    def _add_sets(self, workout_id: int, user_id: int, payload: SetCreate, count: int) -> list[WorkoutSet]:
        key = self._set_target(workout_id, user_id, payload)
        start = self.sets.max_set_number(workout_id, key)
        created = [self._new_set(workout_id, key, start + i, payload) for i in range(1, count + 1)]
        self.sets.commit()
        log.info("Added %d sets of %s to workout %s", count, key, workout_id)
        return created

    def update_set(self, set_id: int, user_id: int, payload: SetUpdate) -> WorkoutSet:
        workout_set = self._owned_set(set_id, user_id)
        was_completed = workout_set.completed
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(workout_set, field, value)
        if workout_set.completed and not was_completed:
            workout_set.performed_at = utcnow()
        self.sets.commit()
        log.info("Updated workout set %s for user %s", set_id, user_id)
        return workout_set

    def delete_set(self, set_id: int, user_id: int) -> None:
        workout_set = self._owned_set(set_id, user_id)
        self.sets.delete(workout_set)
        self.sets.commit()
        log.info("Deleted workout set %s for user %s", set_id, user_id)

    def delete_set_by_exercise(self, workout_id: int, user_id: int, payload: SetDeleteByExercise) -> None:
        self._owned_workout(workout_id, user_id)
        key = exercise_identity(payload.exercise_id, payload.custom_exercise_name)
        target = self.sets.find(workout_id, key, payload.set_number)
        if target is None:
            raise NotFound("Workout set not found")
        if self.sets.count_in_group(workout_id, key) <= 1:
            raise ValidationError("Cannot delete the last set of an exercise")
        self.sets.delete(target)
        self.sets.commit()
        log.info("Deleted set #%s of %s in workout %s for user %s",
                 payload.set_number, key, workout_id, user_id)
