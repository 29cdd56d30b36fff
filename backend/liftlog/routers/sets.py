from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.deps.auth import get_current_user
from liftlog.models import User
from liftlog.schemas.workout_set import SetCreate, SetDeleteByExercise, SetRead, SetUpdate
from liftlog.services.workout_service import WorkoutService

router = APIRouter(tags=["sets"])

@router.post("/workouts/{workout_id}/sets", response_model=SetRead, status_code=status.HTTP_201_CREATED)
def add_set(
    workout_id: int,
    payload: SetCreate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return WorkoutService(db).add_set(workout_id, current.id, payload)

# the set is addressed by exercise identity and set_number, sent in the body
@router.delete("/workouts/{workout_id}/sets/by-exercise", status_code=status.HTTP_204_NO_CONTENT)
def delete_set_by_exercise(
    workout_id: int,
    payload: SetDeleteByExercise,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    WorkoutService(db).delete_set_by_exercise(workout_id, current.id, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.patch("/sets/{set_id}", response_model=SetRead)
def update_set(
    set_id: int,
    payload: SetUpdate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return WorkoutService(db).update_set(set_id, current.id, payload)

@router.delete("/sets/{set_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_set(set_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    WorkoutService(db).delete_set(set_id, current.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
