from liftlog.models.enums import Visibility
from liftlog.models.user import User
from liftlog.models.exercise import Exercise
from liftlog.models.routine import Routine, RoutineExercise
from liftlog.models.workout import Workout, WorkoutSet, is_completed, exercise_key

__all__ = [
    "Visibility",
    "User",
    "Exercise",
    "Routine",
    "RoutineExercise",
    "Workout",
    "WorkoutSet",
    "is_completed",
    "exercise_key",
]
