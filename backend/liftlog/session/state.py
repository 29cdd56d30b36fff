# liftlog/session/state.py
"""
State and transition table of an active workout session.

``reduce(state, event)`` is a pure function; the controller owns all I/O and
only feeds events in once a write has succeeded, so a rejected write never
leaves a half-applied state behind.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from functools import singledispatch

from liftlog.models.workout import exercise_key, is_completed
from liftlog.schemas.workout import WorkoutDetail


class Phase(str, Enum):
    loading = "loading"
    active = "active"
    finishing = "finishing"
    done = "done"


@dataclass(frozen=True, slots=True)
class SlotView:
    set_number: int
    set_id: int | None = None
    reps: int | None = None
    weight_kg: float | None = None
    rpe: float | None = None
    notes: str | None = None

    @property
    def completed(self) -> bool:
        return is_completed(self.reps, self.weight_kg, self.rpe)


@dataclass(frozen=True, slots=True)
class ExerciseView:
    exercise_id: int | None
    exercise_name: str
    is_custom: bool
    slots: tuple[SlotView, ...] = ()

    @property
    def key(self) -> str:
        return exercise_key(self.exercise_id, self.exercise_name if self.is_custom else None)


@dataclass(frozen=True, slots=True)
class Cursor:
    exercise_index: int = 0
    set_index: int = 0


@dataclass(frozen=True, slots=True)
class RestTimer:
    default: int = 90
    remaining: int = 90
    visible: bool = False
    running: bool = False


@dataclass(frozen=True, slots=True)
class Inputs:
    weight: str = ""
    reps: str = ""
    rpe: str = ""
    notes: str = ""


@dataclass(frozen=True, slots=True)
class Progress:
    completed: int
    total: int

    @property
    def percentage(self) -> float:
        return self.completed / self.total * 100 if self.total else 0.0

    @property
    def all_done(self) -> bool:
        return self.total > 0 and self.completed == self.total


@dataclass(frozen=True, slots=True)
class SessionState:
    workout_id: int
    phase: Phase = Phase.loading
    exercises: tuple[ExerciseView, ...] = ()
    cursor: Cursor = field(default_factory=Cursor)
    rest: RestTimer = field(default_factory=RestTimer)
    inputs: Inputs = field(default_factory=Inputs)
    completion_notice: bool = False
    auto_finish_min_exercises: int = 3
    error: str | None = None
    finished_at: datetime | None = None

    @property
    def current_exercise(self) -> ExerciseView | None:
        i = self.cursor.exercise_index
        return self.exercises[i] if 0 <= i < len(self.exercises) else None

    @property
    def current_slot(self) -> SlotView | None:
        ex = self.current_exercise
        if ex is None:
            return None
        j = self.cursor.set_index
        return ex.slots[j] if 0 <= j < len(ex.slots) else None

    @property
    def progress(self) -> Progress:
        slots = [s for ex in self.exercises for s in ex.slots]
        return Progress(completed=sum(1 for s in slots if s.completed), total=len(slots))


def exercises_from_detail(detail: WorkoutDetail) -> tuple[ExerciseView, ...]:
    return tuple(
        ExerciseView(
            exercise_id=g.exercise_id,
            exercise_name=g.exercise_name,
            is_custom=g.is_custom,
            slots=tuple(
                SlotView(set_number=s.set_number, set_id=s.id, reps=s.reps, weight_kg=s.weight_kg,
                         rpe=s.rpe, notes=s.notes)
                for s in sorted(g.sets, key=lambda s: s.set_number)
            ),
        )
        for g in detail.exercises
    )


def first_incomplete(exercises: tuple[ExerciseView, ...]) -> Cursor | None:
    for i, ex in enumerate(exercises):
        for j, slot in enumerate(ex.slots):
            if not slot.completed:
                return Cursor(i, j)
    return None


def next_cursor(exercises: tuple[ExerciseView, ...], cursor: Cursor) -> Cursor:
    ex = exercises[cursor.exercise_index]
    if cursor.set_index < len(ex.slots) - 1:
        return Cursor(cursor.exercise_index, cursor.set_index + 1)
    if cursor.exercise_index < len(exercises) - 1:
        return Cursor(cursor.exercise_index + 1, 0)
    return cursor


# events

@dataclass(frozen=True, slots=True)
class Loaded:
    exercises: tuple[ExerciseView, ...]
    finished_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class InputsChanged:
    weight: str | None = None
    reps: str | None = None
    rpe: str | None = None
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class SetLogged:
    cursor: Cursor
    reps: int | None
    weight_kg: float | None
    rpe: float | None
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class Reconciled:
    exercises: tuple[ExerciseView, ...]
    focus_key: str | None = None


@dataclass(frozen=True, slots=True)
class NavigateTo:
    exercise_index: int


@dataclass(frozen=True, slots=True)
class NavigatePrev:
    pass


@dataclass(frozen=True, slots=True)
class NavigateNext:
    pass


@dataclass(frozen=True, slots=True)
class RestStarted:
    pass


@dataclass(frozen=True, slots=True)
class RestTick:
    pass


@dataclass(frozen=True, slots=True)
class RestToggled:
    pass


@dataclass(frozen=True, slots=True)
class RestSkipped:
    pass


@dataclass(frozen=True, slots=True)
class FinishRequested:
    pass


@dataclass(frozen=True, slots=True)
class Finished:
    finished_at: datetime | None


@dataclass(frozen=True, slots=True)
class Failed:
    message: str
    phase: Phase | None = None


@dataclass(frozen=True, slots=True)
class ErrorDismissed:
    pass


# transitions

@singledispatch
def transition(event, state: SessionState) -> SessionState:
    raise TypeError(f"unhandled session event {type(event).__name__}")


def reduce(state: SessionState, event) -> SessionState:
    return transition(event, state)


@transition.register
def _(event: Loaded, state: SessionState) -> SessionState:
    return replace(
        state,
        phase=Phase.done if event.finished_at is not None else Phase.active,
        exercises=event.exercises,
        cursor=first_incomplete(event.exercises) or Cursor(),
        finished_at=event.finished_at,
        error=None,
    )


@transition.register
def _(event: InputsChanged, state: SessionState) -> SessionState:
    changes = {k: getattr(event, k) for k in ("weight", "reps", "rpe", "notes") if getattr(event, k) is not None}
    return replace(state, inputs=replace(state.inputs, **changes))


@transition.register
def _(event: SetLogged, state: SessionState) -> SessionState:
    i, j = event.cursor.exercise_index, event.cursor.set_index
    ex = state.exercises[i]
    slot = replace(ex.slots[j], reps=event.reps, weight_kg=event.weight_kg, rpe=event.rpe,
                   notes=event.notes if event.notes is not None else ex.slots[j].notes)
    slots = ex.slots[:j] + (slot,) + ex.slots[j + 1:]
    exercises = state.exercises[:i] + (replace(ex, slots=slots),) + state.exercises[i + 1:]

    new = replace(
        state,
        exercises=exercises,
        cursor=next_cursor(exercises, event.cursor),
        inputs=Inputs(),
        error=None,
    )
    if new.progress.all_done:
        rest = replace(state.rest, visible=False, running=False, remaining=state.rest.default)
        phase = Phase.finishing if len(exercises) >= state.auto_finish_min_exercises else state.phase
        return replace(new, completion_notice=True, phase=phase, rest=rest)
    return transition(RestStarted(), new)


@transition.register
def _(event: Reconciled, state: SessionState) -> SessionState:
    exercises = event.exercises
    cursor = state.cursor
    if event.focus_key is not None:
        for i, ex in enumerate(exercises):
            if ex.key == event.focus_key:
                cursor = Cursor(i, 0)
                break
    if not exercises:
        cursor = Cursor()
    else:
        i = min(cursor.exercise_index, len(exercises) - 1)
        j = min(cursor.set_index, max(len(exercises[i].slots) - 1, 0))
        cursor = Cursor(i, j)
    return replace(state, exercises=exercises, cursor=cursor, error=None)


@transition.register
def _(event: NavigateTo, state: SessionState) -> SessionState:
    if not 0 <= event.exercise_index < len(state.exercises):
        return state
    return replace(state, cursor=Cursor(event.exercise_index, 0))


@transition.register
def _(event: NavigatePrev, state: SessionState) -> SessionState:
    return transition(NavigateTo(state.cursor.exercise_index - 1), state)


@transition.register
def _(event: NavigateNext, state: SessionState) -> SessionState:
    return transition(NavigateTo(state.cursor.exercise_index + 1), state)


@transition.register
def _(event: RestStarted, state: SessionState) -> SessionState:
    return replace(state, rest=replace(state.rest, visible=True, running=True, remaining=state.rest.default))


@transition.register
def _(event: RestTick, state: SessionState) -> SessionState:
    rest = state.rest
    if not rest.running:
        return state
    if rest.remaining <= 1:
        return replace(state, rest=replace(rest, visible=False, running=False, remaining=rest.default))
    return replace(state, rest=replace(rest, remaining=rest.remaining - 1))


@transition.register
def _(event: RestToggled, state: SessionState) -> SessionState:
    if not state.rest.visible:
        return state
    return replace(state, rest=replace(state.rest, running=not state.rest.running))


@transition.register
def _(event: RestSkipped, state: SessionState) -> SessionState:
    return replace(state, rest=replace(state.rest, visible=False, running=False, remaining=state.rest.default))


@transition.register
def _(event: FinishRequested, state: SessionState) -> SessionState:
    return replace(state, phase=Phase.finishing, error=None)


@transition.register
def _(event: Finished, state: SessionState) -> SessionState:
    rest = replace(state.rest, visible=False, running=False, remaining=state.rest.default)
    return replace(state, phase=Phase.done, finished_at=event.finished_at, rest=rest)


@transition.register
def _(event: Failed, state: SessionState) -> SessionState:
    return replace(state, error=event.message, phase=event.phase or state.phase)


@transition.register
def _(event: ErrorDismissed, state: SessionState) -> SessionState:
    return replace(state, error=None)
