# liftlog/session/controller.py
"""
Drives one user through one workout.

The controller is cooperative: every public coroutine runs to completion
(including its write) before the next action is handled. State only changes
through ``reduce`` and only after the gateway call has succeeded.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from pydantic import ValidationError as SchemaError

from liftlog.errors import ValidationError, WorkoutError
from liftlog.models.workout import exercise_key, is_completed
from liftlog.schemas.workout_set import SetCreate, SetDeleteByExercise, SetUpdate
from liftlog.session.gateway import ServiceGateway, WorkoutGateway
from liftlog.session.state import (
    ErrorDismissed,
    Failed,
    FinishRequested,
    Finished,
    InputsChanged,
    Loaded,
    NavigateNext,
    NavigatePrev,
    NavigateTo,
    Phase,
    Reconciled,
    RestSkipped,
    RestTick,
    RestTimer,
    RestToggled,
    SessionState,
    SetLogged,
    exercises_from_detail,
    reduce,
)
from liftlog.settings import Settings, get_settings
from liftlog.units import WeightUnit, parse_user_weight

log = logging.getLogger(__name__)

SAVE_SET_ERROR = "Error saving set. Please try again."
FINISH_ERROR = "Error finishing workout. Please try again."
SYNC_ERROR = "Error updating workout. Please try again."
EMPTY_SET_ERROR = "Enter weight, reps or RPE before logging the set."


def _to_int(raw) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid whole number: {raw!r}")


def _to_float(raw) -> float | None:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid number: {raw!r}")


class ActiveSessionController:
    def __init__(
        self,
        workout_id: int,
        gateway: WorkoutGateway,
        *,
        weight_unit: WeightUnit | str = WeightUnit.kg,
        settings: Settings | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        auto_tick: bool = True,
    ):
        s = settings or get_settings()
        self.gateway = gateway
        self.weight_unit = WeightUnit(weight_unit)
        self.finish_delay = s.AUTO_FINISH_DELAY_SECONDS
        self.sleep = sleep
        self.auto_tick = auto_tick
        self.state = SessionState(
            workout_id=workout_id,
            rest=RestTimer(default=s.REST_TIMER_SECONDS, remaining=s.REST_TIMER_SECONDS),
            auto_finish_min_exercises=s.AUTO_FINISH_MIN_EXERCISES,
        )
        self.auto_finish_task: asyncio.Task | None = None
        self._ticker: asyncio.Task | None = None

    @classmethod
    def for_user(cls, user, workout_id: int, **kwargs) -> "ActiveSessionController":
        """Session over the in-process gateway, taking weights in the user's preferred unit."""
        return cls(workout_id, ServiceGateway(user.id), weight_unit=user.weight_unit, **kwargs)

    @property
    def workout_id(self) -> int:
        return self.state.workout_id

    def dispatch(self, event) -> SessionState:
        self.state = reduce(self.state, event)
        return self.state

    def _fail(self, message: str, phase: Phase | None = None) -> bool:
        self.dispatch(Failed(message, phase=phase))
        return False

    # loading / reconciling

    async def load(self) -> bool:
        try:
            detail = await self.gateway.get_workout(self.workout_id)
        except WorkoutError as e:
            return self._fail(e.message)
        except Exception:
            log.exception("loading workout %s failed", self.workout_id)
            return self._fail(SYNC_ERROR)
        self.dispatch(Loaded(exercises_from_detail(detail), finished_at=detail.finished_at))
        return True

    async def _reconcile(self, focus_key: str | None = None) -> None:
        detail = await self.gateway.get_workout(self.workout_id)
        self.dispatch(Reconciled(exercises_from_detail(detail), focus_key=focus_key))

    # inputs

    def set_inputs(self, *, weight=None, reps=None, rpe=None, notes=None) -> SessionState:
        return self.dispatch(InputsChanged(
            weight=None if weight is None else str(weight),
            reps=None if reps is None else str(reps),
            rpe=None if rpe is None else str(rpe),
            notes=notes,
        ))

    def dismiss_error(self) -> SessionState:
        return self.dispatch(ErrorDismissed())

    # logging

    async def log_current_set(self, weight=None, reps=None, rpe=None, notes=None) -> bool:
        state = self.state
        exercise, slot = state.current_exercise, state.current_slot
        if state.phase is not Phase.active or exercise is None or slot is None:
            return False

        inputs = state.inputs
        try:
            weight_kg = parse_user_weight(inputs.weight if weight is None else weight, self.weight_unit)
            reps_value = _to_int(inputs.reps if reps is None else reps)
            rpe_value = _to_float(inputs.rpe if rpe is None else rpe)
            if not is_completed(reps_value, weight_kg, rpe_value):
                raise ValidationError(EMPTY_SET_ERROR)
            notes_value = (inputs.notes if notes is None else notes) or None
            payload = SetCreate(
                exercise_id=exercise.exercise_id,
                custom_exercise_name=exercise.exercise_name if exercise.is_custom else None,
                set_number=slot.set_number,
                reps=reps_value,
                weight_kg=weight_kg,
                rpe=rpe_value,
                notes=notes_value,
            )
        except ValidationError as e:
            return self._fail(e.message)
        except SchemaError as e:
            return self._fail(e.errors()[0]["msg"])

        cursor = state.cursor
        try:
            if slot.completed and slot.set_id is not None:
                # re-logging a done slot overwrites that row
                fields = {"reps", "weight_kg", "rpe"} | ({"notes"} if notes_value is not None else set())
                await self.gateway.update_set(slot.set_id, SetUpdate(**payload.model_dump(include=fields)))
            else:
                await self.gateway.add_set(self.workout_id, payload)
        except WorkoutError as e:
            log.warning("saving set failed for workout %s: %s", self.workout_id, e.message)
            return self._fail(e.message)
        except Exception:
            log.exception("saving set failed for workout %s", self.workout_id)
            return self._fail(SAVE_SET_ERROR)

        self.dispatch(SetLogged(cursor=cursor, reps=reps_value, weight_kg=weight_kg,
                                rpe=rpe_value, notes=notes_value))
        if self.state.phase is Phase.finishing:
            log.info("workout %s complete; finishing in %ss", self.workout_id, self.finish_delay)
            self.auto_finish_task = asyncio.create_task(self._auto_finish())
        elif self.state.rest.running:
            self._start_ticker()
        return True

    # structure changes: write, then re-fetch the whole workout

    async def add_exercise(self, *, exercise_id: int | None = None,
                           custom_exercise_name: str | None = None, set_count: int = 3) -> bool:
        if self.state.phase not in (Phase.active, Phase.done):
            return False
        try:
            await self.gateway.add_sets(self.workout_id, SetCreate(
                exercise_id=exercise_id, custom_exercise_name=custom_exercise_name,
            ), set_count)
            await self._reconcile(focus_key=exercise_key(exercise_id, custom_exercise_name))
        except WorkoutError as e:
            return self._fail(e.message)
        except Exception:
            log.exception("adding exercise to workout %s failed", self.workout_id)
            return self._fail(SYNC_ERROR)
        return True

    async def add_set_to_current_exercise(self) -> bool:
        exercise = self.state.current_exercise
        if exercise is None:
            return False
        try:
            await self.gateway.add_set(self.workout_id, SetCreate(
                exercise_id=exercise.exercise_id,
                custom_exercise_name=exercise.exercise_name if exercise.is_custom else None,
            ))
            await self._reconcile()
        except WorkoutError as e:
            return self._fail(e.message)
        except Exception:
            log.exception("adding set to workout %s failed", self.workout_id)
            return self._fail(SYNC_ERROR)
        return True

    async def remove_set(self, exercise_index: int, set_number: int) -> bool:
        if not 0 <= exercise_index < len(self.state.exercises):
            return False
        exercise = self.state.exercises[exercise_index]
        try:
            await self.gateway.delete_set_by_exercise(self.workout_id, SetDeleteByExercise(
                exercise_id=exercise.exercise_id,
                custom_exercise_name=exercise.exercise_name if exercise.is_custom else None,
                set_number=set_number,
            ))
            await self._reconcile()
        except WorkoutError as e:
            return self._fail(e.message)
        except Exception:
            log.exception("removing set from workout %s failed", self.workout_id)
            return self._fail(SYNC_ERROR)
        return True

    # finishing

    async def _auto_finish(self) -> None:
        await self.sleep(self.finish_delay)
        if self.state.phase is Phase.finishing:
            await self.finish()

    async def finish(self) -> bool:
        if self.state.phase is Phase.loading:
            return False
        self.dispatch(FinishRequested())
        try:
            workout = await self.gateway.finish_workout(self.workout_id)
        except WorkoutError as e:
            return self._fail(e.message, phase=Phase.active)
        except Exception:
            log.exception("finishing workout %s failed", self.workout_id)
            return self._fail(FINISH_ERROR, phase=Phase.active)
        self.dispatch(Finished(workout.finished_at))
        log.info("workout %s finished", self.workout_id)
        return True

    # navigation (never touches the rest timer)

    def navigate_to_exercise(self, exercise_index: int) -> SessionState:
        return self.dispatch(NavigateTo(exercise_index))

    def navigate_prev(self) -> SessionState:
        return self.dispatch(NavigatePrev())

    def navigate_next(self) -> SessionState:
        return self.dispatch(NavigateNext())

    # rest timer

    def tick(self) -> SessionState:
        return self.dispatch(RestTick())

    def toggle_rest_timer(self) -> SessionState:
        self.dispatch(RestToggled())
        if self.state.rest.running:
            self._start_ticker()
        return self.state

    def skip_rest_timer(self) -> SessionState:
        return self.dispatch(RestSkipped())

    def _start_ticker(self) -> None:
        if not self.auto_tick or (self._ticker is not None and not self._ticker.done()):
            return
        self._ticker = asyncio.create_task(self.run_rest_timer())

    async def run_rest_timer(self) -> None:
        """One tick per second while the timer runs; advisory only."""
        while self.state.rest.running:
            await asyncio.sleep(1)
            self.tick()
