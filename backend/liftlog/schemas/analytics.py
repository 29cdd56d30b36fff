from pydantic import BaseModel

class WorkoutStats(BaseModel):
    total_workouts: int
    total_sets: int
    total_volume: float
    average_workout_duration: int
    workouts_this_week: int
    workouts_this_month: int

class WeekBucket(BaseModel):
    week: str
    workouts: int

class MuscleGroupVolume(BaseModel):
    muscle_group: str
    volume: int

class MonthVolume(BaseModel):
    month: str
    volume: int

class CalendarDay(BaseModel):
    date: str
    count: int

class StreakSummary(BaseModel):
    total_workouts: int
    current_streak: int
    longest_streak: int
    this_month_workouts: int
    calendar: list[CalendarDay]
