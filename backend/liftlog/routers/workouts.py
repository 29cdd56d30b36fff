from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.deps.auth import get_current_user, get_optional_user
from liftlog.models import User
from liftlog.schemas.workout import WorkoutCreate, WorkoutDetail, WorkoutPage, WorkoutRead, WorkoutUpdate
from liftlog.services.workout_service import WorkoutService

router = APIRouter(prefix="/workouts", tags=["workouts"])

@router.post("", response_model=WorkoutDetail, status_code=status.HTTP_201_CREATED)
def create_workout(payload: WorkoutCreate, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return WorkoutService(db).create_workout(current.id, payload)

@router.get("", response_model=WorkoutPage)
def list_my_workouts(
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    include_finished: bool = Query(True),
    routine_id: int | None = Query(None),
):
    page = WorkoutService(db).get_user_workouts(
        current.id, limit=limit, offset=offset, include_finished=include_finished, routine_id=routine_id
    )
    return WorkoutPage(workouts=[WorkoutRead.model_validate(w) for w in page.items], total=page.total)

@router.get("/{workout_id}", response_model=WorkoutDetail)
def get_workout(workout_id: int, db: Session = Depends(get_db), current: User | None = Depends(get_optional_user)):
    return WorkoutService(db).get_workout_by_id(workout_id, current.id if current else None)

@router.patch("/{workout_id}", response_model=WorkoutRead)
def update_workout(workout_id: int, payload: WorkoutUpdate,
                   db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return WorkoutService(db).update_workout(workout_id, current.id, payload)

@router.delete("/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workout(workout_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    WorkoutService(db).delete_workout(workout_id, current.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/{workout_id}/finish", response_model=WorkoutRead)
def finish_workout(workout_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return WorkoutService(db).finish_workout(workout_id, current.id)
