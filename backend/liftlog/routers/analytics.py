from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.deps.auth import get_current_user
from liftlog.models import User
from liftlog.schemas.analytics import MonthVolume, MuscleGroupVolume, StreakSummary, WeekBucket, WorkoutStats
from liftlog.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])

@router.get("/stats", response_model=WorkoutStats)
def workout_stats(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return AnalyticsService(db).workout_stats(current.id)

@router.get("/progress", response_model=list[WeekBucket])
def overall_progress(
    weeks: int = Query(6, ge=1, le=52),
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return AnalyticsService(db).overall_progress(current.id, weeks=weeks)

@router.get("/muscle-groups", response_model=list[MuscleGroupVolume])
def muscle_groups(
    months: int = Query(6, ge=1, le=24),
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return AnalyticsService(db).muscle_group_breakdown(current.id, months=months)

@router.get("/volume", response_model=list[MonthVolume])
def volume_over_time(
    months: int = Query(6, ge=1, le=24),
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return AnalyticsService(db).volume_over_time(current.id, months=months)

@router.get("/streaks", response_model=StreakSummary)
def streaks(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return AnalyticsService(db).streak_summary(current.id)
