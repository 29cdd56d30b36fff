from __future__ import annotations
from typing import Optional

from sqlalchemy import select, func

from liftlog.models import Workout, WorkoutSet
from liftlog.repositories.base import BaseRepository

class SetRepository(BaseRepository[WorkoutSet]):
    model = WorkoutSet

    def owner_of(self, set_id: int) -> Optional[int]:
        """Set ownership is transitive through the parent workout."""
        return self.db.execute(
            select(Workout.user_id).join(WorkoutSet, WorkoutSet.workout_id == Workout.id)
            .where(WorkoutSet.id == set_id)
        ).scalar_one_or_none()

    def list_by_workout(self, workout_id: int) -> list[WorkoutSet]:
        stmt = select(WorkoutSet).where(WorkoutSet.workout_id == workout_id)\
                                 .order_by(WorkoutSet.exercise_key.asc(), WorkoutSet.set_number.asc())
        return list(self.db.execute(stmt).scalars().unique().all())

    def list_by_user(self, user_id: int) -> list[WorkoutSet]:
        stmt = select(WorkoutSet).join(Workout, WorkoutSet.workout_id == Workout.id)\
                                 .where(Workout.user_id == user_id)\
                                 .order_by(WorkoutSet.workout_id.asc(), WorkoutSet.exercise_key.asc(),
                                           WorkoutSet.set_number.asc())
        return list(self.db.execute(stmt).scalars().unique().all())

    def find(self, workout_id: int, key: str, set_number: int) -> Optional[WorkoutSet]:
        stmt = select(WorkoutSet).where(
            WorkoutSet.workout_id == workout_id,
            WorkoutSet.exercise_key == key,
            WorkoutSet.set_number == set_number,
        )
        return self.db.execute(stmt).scalars().unique().one_or_none()

    def max_set_number(self, workout_id: int, key: str) -> int:
        max_no = self.db.execute(
            select(func.max(WorkoutSet.set_number)).where(
                WorkoutSet.workout_id == workout_id, WorkoutSet.exercise_key == key
            )
        ).scalar_one()
        return max_no or 0

    def count_in_group(self, workout_id: int, key: str) -> int:
        return self.db.execute(
            select(func.count()).select_from(WorkoutSet).where(
                WorkoutSet.workout_id == workout_id, WorkoutSet.exercise_key == key
            )
        ).scalar_one()

    def create(self, workout_id: int, *, key: str, set_number: int, **fields) -> WorkoutSet:
        return self.add_and_refresh(
            WorkoutSet(workout_id=workout_id, exercise_key=key, set_number=set_number, **fields)
        )
