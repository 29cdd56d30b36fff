from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.errors import NotFound
from liftlog.repositories.exercise_repo import ExerciseRepository
from liftlog.schemas.exercise import ExercisePage, ExerciseRead

# read-only catalog; ids from here feed routine slots and workout sets
router = APIRouter(prefix="/exercises", tags=["exercises"])

@router.get("", response_model=ExercisePage)
def list_exercises(
    q: str | None = Query(None, max_length=100),
    category: str | None = Query(None, max_length=60),
    muscle: str | None = Query(None, max_length=60),
    limit: int = Query(18, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    page = ExerciseRepository(db).search(q=q, category=category, muscle=muscle, limit=limit, offset=offset)
    return ExercisePage(exercises=[ExerciseRead.model_validate(e) for e in page.items], total=page.total)

@router.get("/{exercise_id}", response_model=ExerciseRead)
def get_exercise(exercise_id: int, db: Session = Depends(get_db)):
    exercise = ExerciseRepository(db).get(exercise_id)
    if exercise is None:
        raise NotFound("Exercise not found")
    return exercise
