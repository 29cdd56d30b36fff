from __future__ import annotations
from typing import Optional

from sqlalchemy import select, func

from liftlog.models import Workout, Visibility
from liftlog.repositories.base import BaseRepository, Page

class WorkoutRepository(BaseRepository[Workout]):
    model = Workout

    def owner_of(self, workout_id: int) -> Optional[int]:
        """Owner lookup used by every mutating call; None when the workout is absent."""
        return self.db.execute(
            select(Workout.user_id).where(Workout.id == workout_id)
        ).scalar_one_or_none()

    def list_by_user(
        self,
        user_id: int,
        *,
        limit: int = 20,
        offset: int = 0,
        include_finished: bool = True,
        routine_id: int | None = None,
    ) -> Page[Workout]:
        conds = [Workout.user_id == user_id]
        if not include_finished:
            conds.append(Workout.finished_at.is_(None))
        if routine_id is not None:
            conds.append(Workout.routine_id == routine_id)
        stmt = select(Workout).where(*conds).order_by(Workout.started_at.desc(), Workout.id.desc())
        items = self.db.execute(stmt.limit(limit).offset(offset)).scalars().all()
        total = self.db.execute(select(func.count()).select_from(Workout).where(*conds)).scalar_one()
        return Page(items=list(items), total=total, limit=limit, offset=offset)

    def all_for_user(self, user_id: int) -> list[Workout]:
        stmt = select(Workout).where(Workout.user_id == user_id).order_by(Workout.started_at.asc())
        return list(self.db.execute(stmt).scalars().all())

    def create(self, user_id: int, *, routine_id: int | None = None, title: str | None = None,
               visibility: Visibility = Visibility.private) -> Workout:
        return self.add_and_refresh(
            Workout(user_id=user_id, routine_id=routine_id, title=title, visibility=visibility)
        )
