from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from liftlog.repositories.set_repo import SetRepository
from liftlog.repositories.workout_repo import WorkoutRepository
from liftlog.schemas.analytics import MonthVolume, MuscleGroupVolume, StreakSummary, WeekBucket, WorkoutStats
from liftlog.services import analytics
from liftlog.timeutil import utcnow

log = logging.getLogger(__name__)


class AnalyticsService:
    """Loads one user's history and hands it to the pure functions in ``analytics``."""

    def __init__(self, db: Session):
        self.workouts = WorkoutRepository(db)
        self.sets = SetRepository(db)

    def _history(self, user_id: int):
        return self.workouts.all_for_user(user_id), self.sets.list_by_user(user_id)

    def workout_stats(self, user_id: int, *, now: datetime | None = None) -> WorkoutStats:
        workouts, sets = self._history(user_id)
        return WorkoutStats(**analytics.workout_stats(workouts, sets, now=now or utcnow()))

    def overall_progress(self, user_id: int, *, weeks: int = 6,
                         now: datetime | None = None) -> list[WeekBucket]:
        workouts = self.workouts.all_for_user(user_id)
        rows = analytics.overall_progress(workouts, weeks=weeks, now=now or utcnow())
        return [WeekBucket(**r) for r in rows]

    def muscle_group_breakdown(self, user_id: int, *, months: int = 6,
                               now: datetime | None = None) -> list[MuscleGroupVolume]:
        workouts, sets = self._history(user_id)
        log.info("muscle group analytics for user %s over %s months (%d sets)", user_id, months, len(sets))
        rows = analytics.muscle_group_breakdown(workouts, sets, months=months, now=now or utcnow())
        return [MuscleGroupVolume(**r) for r in rows]

    def volume_over_time(self, user_id: int, *, months: int = 6,
                         now: datetime | None = None) -> list[MonthVolume]:
        workouts, sets = self._history(user_id)
        rows = analytics.volume_over_time(workouts, sets, months=months, now=now or utcnow())
        return [MonthVolume(**r) for r in rows]

    def streak_summary(self, user_id: int, *, now: datetime | None = None) -> StreakSummary:
        workouts = self.workouts.all_for_user(user_id)
        return StreakSummary(**analytics.streak_summary(workouts, now=now or utcnow()))
