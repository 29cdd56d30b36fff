from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.deps.auth import get_current_user, get_optional_user
from liftlog.models import User
from liftlog.schemas.routine import RoutineCreate, RoutineExerciseCreate, RoutineExerciseRead, RoutineRead
from liftlog.services.routine_service import RoutineService

router = APIRouter(prefix="/routines", tags=["routines"])

@router.post("", response_model=RoutineRead, status_code=status.HTTP_201_CREATED)
def create_routine(payload: RoutineCreate, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return RoutineService(db).create_routine(current.id, payload)

@router.get("", response_model=list[RoutineRead])
def list_my_routines(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return RoutineService(db).list_user_routines(current.id)

@router.get("/{routine_id}", response_model=RoutineRead)
def get_routine(routine_id: int, db: Session = Depends(get_db), current: User | None = Depends(get_optional_user)):
    return RoutineService(db).get_routine(routine_id, current.id if current else None)

@router.delete("/{routine_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_routine(routine_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    RoutineService(db).delete_routine(routine_id, current.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/{routine_id}/exercises", response_model=RoutineExerciseRead, status_code=status.HTTP_201_CREATED)
def add_routine_exercise(
    routine_id: int,
    payload: RoutineExerciseCreate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return RoutineService(db).add_exercise_to_routine(routine_id, current.id, payload)

@router.delete("/exercises/{routine_exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_routine_exercise(
    routine_exercise_id: int,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    RoutineService(db).remove_exercise_from_routine(routine_exercise_id, current.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
