# liftlog/repositories/base.py
from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generic, Iterator, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from liftlog.errors import DuplicateRow, TransientPersistenceError

T = TypeVar("T")  # SQLAlchemy model type

@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int

class BaseRepository(Generic[T]):
    """Lightweight base for repositories using SQLAlchemy 2.0 style.

    Writes only flush; the service that owns the unit of work calls ``commit``.
    Any storage failure while flushing or committing rolls the session back.
    """
    model: type[T]

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def guarded(self) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateRow(f"storage conflict: {e.__class__.__name__}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise TransientPersistenceError(f"storage failure: {e.__class__.__name__}") from e

    def get(self, entity_id: int) -> T | None:
        return self.db.get(self.model, entity_id)

    def add_and_refresh(self, entity: T) -> T:
        with self.guarded():
            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
        return entity

    def delete(self, entity: T) -> None:
        with self.guarded():
            self.db.delete(entity)
            self.db.flush()

    def commit(self) -> None:
        with self.guarded():
            self.db.commit()
