# liftlog/session/gateway.py
from __future__ import annotations

import asyncio
from typing import Callable, Protocol, TypeVar

from sqlalchemy.orm import Session

from liftlog.db import SessionLocal
from liftlog.schemas.workout import WorkoutDetail, WorkoutRead
from liftlog.schemas.workout_set import SetCreate, SetDeleteByExercise, SetRead, SetUpdate
from liftlog.services.workout_service import WorkoutService

R = TypeVar("R")


class WorkoutGateway(Protocol):
    """What the session controller needs from persistence."""

    async def get_workout(self, workout_id: int) -> WorkoutDetail: ...

    async def add_set(self, workout_id: int, payload: SetCreate) -> SetRead: ...

    async def add_sets(self, workout_id: int, payload: SetCreate, count: int) -> list[SetRead]: ...

    async def update_set(self, set_id: int, payload: SetUpdate) -> SetRead: ...

    async def delete_set_by_exercise(self, workout_id: int, payload: SetDeleteByExercise) -> None: ...

    async def finish_workout(self, workout_id: int) -> WorkoutRead: ...


class ServiceGateway:
    """In-process gateway: one short-lived DB session per call, acting as ``user_id``.

    SQLAlchemy sessions block, so every call runs in a worker thread and the
    event loop keeps ticking the rest timer meanwhile.
    """

    def __init__(self, user_id: int, session_factory: Callable[[], Session] = SessionLocal):
        self.user_id = user_id
        self.session_factory = session_factory

    def _in_session(self, work: Callable[[WorkoutService], R]) -> R:
        with self.session_factory() as db:
            return work(WorkoutService(db))

    async def _call(self, work: Callable[[WorkoutService], R]) -> R:
        return await asyncio.to_thread(self._in_session, work)

    async def get_workout(self, workout_id: int) -> WorkoutDetail:
        return await self._call(lambda svc: svc.get_workout_by_id(workout_id, self.user_id))

    async def add_set(self, workout_id: int, payload: SetCreate) -> SetRead:
        return await self._call(
            lambda svc: SetRead.model_validate(svc.add_set(workout_id, self.user_id, payload))
        )

    async def add_sets(self, workout_id: int, payload: SetCreate, count: int) -> list[SetRead]:
        return await self._call(lambda svc: [
            SetRead.model_validate(s) for s in svc.add_sets(workout_id, self.user_id, payload, count)
        ])

    async def update_set(self, set_id: int, payload: SetUpdate) -> SetRead:
        return await self._call(
            lambda svc: SetRead.model_validate(svc.update_set(set_id, self.user_id, payload))
        )

    async def delete_set_by_exercise(self, workout_id: int, payload: SetDeleteByExercise) -> None:
        await self._call(lambda svc: svc.delete_set_by_exercise(workout_id, self.user_id, payload))

    async def finish_workout(self, workout_id: int) -> WorkoutRead:
        return await self._call(
            lambda svc: WorkoutRead.model_validate(svc.finish_workout(workout_id, self.user_id))
        )
