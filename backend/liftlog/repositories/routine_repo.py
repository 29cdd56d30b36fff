from __future__ import annotations
from typing import Optional

from sqlalchemy import select, func

from liftlog.models import Routine, RoutineExercise, Visibility
from liftlog.repositories.base import BaseRepository

class RoutineRepository(BaseRepository[Routine]):
    model = Routine

    def list_by_author(self, author_id: int) -> list[Routine]:
        stmt = select(Routine).where(Routine.author_id == author_id).order_by(Routine.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def create(self, author_id: int, *, title: str, description: str | None,
               visibility: Visibility = Visibility.private) -> Routine:
        return self.add_and_refresh(
            Routine(author_id=author_id, title=title, description=description, visibility=visibility)
        )

    # routine exercises, canonical order (day_index, order_index)
    def list_exercises(self, routine_id: int, *, day_index: int | None = None) -> list[RoutineExercise]:
        stmt = select(RoutineExercise).where(RoutineExercise.routine_id == routine_id)
        if day_index is not None:
            stmt = stmt.where(RoutineExercise.day_index == day_index)
        stmt = stmt.order_by(RoutineExercise.day_index.asc(), RoutineExercise.order_index.asc())
        return list(self.db.execute(stmt).scalars().unique().all())

    def get_exercise(self, routine_exercise_id: int) -> Optional[RoutineExercise]:
        return self.db.get(RoutineExercise, routine_exercise_id)

    def max_order_index(self, routine_id: int, day_index: int) -> int | None:
        return self.db.execute(
            select(func.max(RoutineExercise.order_index)).where(
                RoutineExercise.routine_id == routine_id,
                RoutineExercise.day_index == day_index,
            )
        ).scalar_one()

    def order_index_taken(self, routine_id: int, day_index: int, order_index: int) -> bool:
        found = self.db.execute(
            select(RoutineExercise.id).where(
                RoutineExercise.routine_id == routine_id,
                RoutineExercise.day_index == day_index,
                RoutineExercise.order_index == order_index,
            )
        ).first()
        return found is not None

    def add_exercise(self, routine_id: int, **fields) -> RoutineExercise:
        return self.add_and_refresh(RoutineExercise(routine_id=routine_id, **fields))
