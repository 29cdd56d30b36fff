import asyncio
import threading
from datetime import datetime, timezone
from types import SimpleNamespace

from liftlog.errors import NotFound, TransientPersistenceError, ValidationError
from liftlog.models import Visibility, exercise_key, is_completed
from liftlog.db import SessionLocal
from liftlog.repositories.workout_repo import WorkoutRepository
from liftlog.schemas.routine import RoutineCreate, RoutineExerciseCreate
from liftlog.schemas.workout import ExerciseGroup, SetSummary, WorkoutCreate, WorkoutDetail
from liftlog.services.routine_service import RoutineService
from liftlog.services.workout_service import WorkoutService
from liftlog.session.controller import (
    EMPTY_SET_ERROR, FINISH_ERROR, SAVE_SET_ERROR, ActiveSessionController,
)
from liftlog.session.gateway import ServiceGateway
from liftlog.session.state import Cursor, Phase


class MemoryGateway:
    """Keeps one workout in memory; ``fail`` makes the next write raise."""

    def __init__(self, plan):
        self.groups = []
        self.next_id = 1
        for exercise_id, sets in plan:
            group = self._group(exercise_id, None)
            for _ in range(sets):
                self._append(group, {})
        self.finished_at = None
        self.fail = None
        self.writes = []

    def _group(self, exercise_id, custom_name):
        key = exercise_key(exercise_id, custom_name)
        for g in self.groups:
            if g["key"] == key:
                return g
        g = {"key": key, "exercise_id": exercise_id,
             "name": custom_name or f"Exercise {exercise_id}", "sets": []}
        self.groups.append(g)
        return g

    def _append(self, group, fields):
        number = max((s["set_number"] for s in group["sets"]), default=0) + 1
        row = {"id": self.next_id, "set_number": number, "reps": None, "weight_kg": None,
               "rpe": None, "notes": None}
        row.update(fields)
        self.next_id += 1
        group["sets"].append(row)
        return row

    def _raise_if_failing(self):
        if self.fail is not None:
            error, self.fail = self.fail, None
            raise error

    async def get_workout(self, workout_id):
        return WorkoutDetail(
            id=workout_id, user_id=1, visibility=Visibility.private,
            started_at=datetime(2024, 3, 13, tzinfo=timezone.utc), finished_at=self.finished_at,
            exercises=[
                ExerciseGroup(
                    exercise_id=g["exercise_id"], exercise_name=g["name"],
                    is_custom=g["exercise_id"] is None, order_index=i,
                    sets=[SetSummary(**s, completed=is_completed(s["reps"], s["weight_kg"], s["rpe"]))
                          for s in g["sets"]],
                )
                for i, g in enumerate(self.groups)
            ],
        )

    async def add_set(self, workout_id, payload):
        self._raise_if_failing()
        self.writes.append(payload)
        group = self._group(payload.exercise_id, payload.custom_exercise_name)
        fields = {k: getattr(payload, k) for k in ("reps", "weight_kg", "rpe", "notes")
                  if getattr(payload, k) is not None}
        for s in group["sets"]:
            if s["set_number"] == payload.set_number and not is_completed(s["reps"], s["weight_kg"], s["rpe"]):
                s.update(fields)
                return s
        return self._append(group, fields)

    async def add_sets(self, workout_id, payload, count):
        self._raise_if_failing()
        group = self._group(payload.exercise_id, payload.custom_exercise_name)
        return [self._append(group, {}) for _ in range(count)]

    async def update_set(self, set_id, payload):
        self._raise_if_failing()
        self.writes.append(payload)
        for g in self.groups:
            for s in g["sets"]:
                if s["id"] == set_id:
                    s.update(payload.model_dump(exclude_unset=True, include={"reps", "weight_kg", "rpe", "notes"}))
                    return s
        raise NotFound("Workout set not found")

    def stored(self, index):
        return [(s["set_number"], s["reps"]) for s in self.groups[index]["sets"]]

    async def delete_set_by_exercise(self, workout_id, payload):
        self._raise_if_failing()
        group = self._group(payload.exercise_id, payload.custom_exercise_name)
        if len(group["sets"]) <= 1:
            raise ValidationError("Cannot delete the last set of an exercise")
        group["sets"] = [s for s in group["sets"] if s["set_number"] != payload.set_number]

    async def finish_workout(self, workout_id):
        self._raise_if_failing()
        self.finished_at = datetime.now(timezone.utc)
        return SimpleNamespace(finished_at=self.finished_at)


def make_controller(gateway, workout_id=7, **kw):
    sleeps = []

    async def no_sleep(seconds):
        sleeps.append(seconds)

    controller = ActiveSessionController(workout_id, gateway, sleep=no_sleep, auto_tick=False, **kw)
    return controller, sleeps


def test_load_and_log_in_pounds():
    async def scenario():
        gateway = MemoryGateway([(1, 2), (2, 1)])
        controller, _ = make_controller(gateway, weight_unit="lbs")
        assert await controller.load()
        assert controller.state.phase is Phase.active

        controller.set_inputs(weight=100, reps=8)
        assert await controller.log_current_set()

        payload = gateway.writes[-1]
        assert payload.exercise_id == 1 and payload.set_number == 1
        assert payload.weight_kg == 45.4 and payload.reps == 8
        state = controller.state
        assert state.exercises[0].slots[0].weight_kg == 45.4
        assert state.cursor == Cursor(0, 1)
        assert state.inputs.weight == ""
        assert state.rest.running
    asyncio.run(scenario())


def test_empty_log_is_rejected_without_a_write():
    async def scenario():
        gateway = MemoryGateway([(1, 2)])
        controller, _ = make_controller(gateway)
        await controller.load()
        assert not await controller.log_current_set()
        assert controller.state.error == EMPTY_SET_ERROR
        assert gateway.writes == []
    asyncio.run(scenario())


def test_failed_write_leaves_state_unchanged():
    async def scenario():
        gateway = MemoryGateway([(1, 2)])
        controller, _ = make_controller(gateway)
        await controller.load()
        before = controller.state

        gateway.fail = TransientPersistenceError("storage failure: OperationalError")
        assert not await controller.log_current_set(weight="80", reps="5")
        after = controller.state
        assert after.exercises == before.exercises
        assert after.cursor == before.cursor
        assert after.rest == before.rest
        assert after.error == "storage failure: OperationalError"

        gateway.fail = RuntimeError("connection reset")
        assert not await controller.log_current_set(weight="80", reps="5")
        assert controller.state.error == SAVE_SET_ERROR
        assert controller.state.exercises == before.exercises

        controller.dismiss_error()
        assert controller.state.error is None
    asyncio.run(scenario())


def test_last_set_of_three_exercises_auto_finishes():
    async def scenario():
        gateway = MemoryGateway([(1, 1), (2, 1), (3, 1)])
        controller, sleeps = make_controller(gateway)
        await controller.load()
        for _ in range(2):
            assert await controller.log_current_set(reps="10")
        assert controller.auto_finish_task is None

        assert await controller.log_current_set(reps="10")
        assert controller.state.phase is Phase.finishing
        assert controller.state.completion_notice
        await controller.auto_finish_task

        assert sleeps == [2.0]
        assert controller.state.phase is Phase.done
        assert controller.state.finished_at == gateway.finished_at is not None
    asyncio.run(scenario())


def test_two_exercises_wait_for_manual_finish():
    async def scenario():
        gateway = MemoryGateway([(1, 1), (2, 1)])
        controller, sleeps = make_controller(gateway)
        await controller.load()
        await controller.log_current_set(reps="10")
        await controller.log_current_set(reps="10")

        assert controller.state.completion_notice
        assert controller.state.phase is Phase.active
        assert controller.auto_finish_task is None
        assert gateway.finished_at is None

        assert await controller.finish()
        assert controller.state.phase is Phase.done
        assert sleeps == []
    asyncio.run(scenario())


def test_failed_auto_finish_returns_to_active():
    async def scenario():
        gateway = MemoryGateway([(1, 1), (2, 1), (3, 1)])
        controller, _ = make_controller(gateway)
        await controller.load()
        await controller.log_current_set(rpe="7")
        await controller.log_current_set(rpe="7")
        await controller.log_current_set(rpe="7")
        gateway.fail = RuntimeError("timeout")
        await controller.auto_finish_task

        assert controller.state.phase is Phase.active
        assert controller.state.error == FINISH_ERROR
        assert controller.state.finished_at is None
    asyncio.run(scenario())


def test_structure_changes_reconcile_from_the_gateway():
    async def scenario():
        gateway = MemoryGateway([(1, 2)])
        controller, _ = make_controller(gateway)
        await controller.load()

        assert await controller.add_exercise(custom_exercise_name="Face Pull", set_count=2)
        state = controller.state
        assert [e.exercise_name for e in state.exercises] == ["Exercise 1", "Face Pull"]
        assert state.cursor == Cursor(1, 0)
        assert len(state.exercises[1].slots) == 2

        assert await controller.add_set_to_current_exercise()
        assert [s.set_number for s in controller.state.exercises[1].slots] == [1, 2, 3]

        assert await controller.remove_set(0, 2)
        assert [s.set_number for s in controller.state.exercises[0].slots] == [1]
        assert not await controller.remove_set(0, 1)
        assert controller.state.error == "Cannot delete the last set of an exercise"
        assert len(controller.state.exercises[0].slots) == 1
    asyncio.run(scenario())


def test_relogging_a_completed_slot_overwrites_it():
    async def scenario():
        gateway = MemoryGateway([(1, 2), (2, 2), (3, 2)])
        controller, _ = make_controller(gateway)
        await controller.load()
        assert await controller.log_current_set(reps="5")

        controller.navigate_to_exercise(0)
        assert controller.state.current_slot.completed
        assert await controller.log_current_set(reps="7")

        local = [(s.set_number, s.reps) for s in controller.state.exercises[0].slots]
        assert local == [(1, 7), (2, None)]
        assert gateway.stored(0) == local
        assert controller.state.cursor == Cursor(0, 1)
    asyncio.run(scenario())


def test_weight_typo_is_rejected_without_a_write():
    async def scenario():
        gateway = MemoryGateway([(1, 2)])
        controller, _ = make_controller(gateway)
        await controller.load()
        assert not await controller.log_current_set(weight="abc", reps="5")
        assert controller.state.error == "invalid weight: 'abc'"
        assert gateway.writes == []
        assert not controller.state.exercises[0].slots[0].completed
    asyncio.run(scenario())


def test_failed_add_exercise_stores_nothing():
    async def scenario():
        gateway = MemoryGateway([(1, 1), (2, 1), (3, 1)])
        controller, _ = make_controller(gateway)
        await controller.load()
        before = controller.state

        gateway.fail = TransientPersistenceError("storage failure: OperationalError")
        assert not await controller.add_exercise(exercise_id=9)
        assert [g["key"] for g in gateway.groups] == ["db:1", "db:2", "db:3"]
        assert controller.state.exercises == before.exercises
        assert controller.state.error == "storage failure: OperationalError"
    asyncio.run(scenario())


def test_loading_a_finished_workout_lands_in_done():
    async def scenario():
        gateway = MemoryGateway([(1, 1)])
        gateway.finished_at = datetime(2024, 3, 12, tzinfo=timezone.utc)
        controller, _ = make_controller(gateway)
        assert await controller.load()
        assert controller.state.phase is Phase.done
        assert not await controller.log_current_set(reps="5")
    asyncio.run(scenario())


def test_navigation_and_timer_controls():
    async def scenario():
        gateway = MemoryGateway([(1, 3), (2, 2)])
        controller, _ = make_controller(gateway)
        await controller.load()
        await controller.log_current_set(reps="5")
        controller.tick()
        assert controller.state.rest.remaining == 89

        controller.navigate_next()
        assert controller.state.cursor == Cursor(1, 0)
        assert controller.state.rest.remaining == 89

        controller.toggle_rest_timer()
        assert not controller.state.rest.running
        controller.skip_rest_timer()
        assert not controller.state.rest.visible

        controller.navigate_prev()
        controller.navigate_to_exercise(5)
        assert controller.state.cursor == Cursor(0, 0)
    asyncio.run(scenario())


def test_full_session_against_the_database(db, make_user, exercises):
    user = make_user()
    user.weight_unit = "lbs"
    db.commit()
    routine = RoutineService(db).create_routine(user.id, RoutineCreate(title="Triple", exercises=[
        RoutineExerciseCreate(exercise_id=exercises["bench"].id, sets="1"),
        RoutineExerciseCreate(exercise_id=exercises["row"].id, sets="1"),
        RoutineExerciseCreate(custom_exercise_name="Plank", sets="1"),
    ]))
    workout = WorkoutService(db).create_workout(user.id, WorkoutCreate(routine_id=routine.id))

    async def scenario():
        async def no_sleep(seconds):
            pass

        controller = ActiveSessionController.for_user(user, workout.id, sleep=no_sleep, auto_tick=False)
        assert await controller.load()
        assert [e.exercise_name for e in controller.state.exercises] == ["Bench Press", "Barbell Row", "Plank"]
        await controller.log_current_set(weight="220.5", reps="5")
        await controller.log_current_set(weight="176.4", reps="8")
        await controller.log_current_set(rpe="9")
        await controller.auto_finish_task
        return controller.state

    state = asyncio.run(scenario())

    assert state.phase is Phase.done
    db.expire_all()
    stored = WorkoutRepository(db).get(workout.id)
    assert stored.finished_at is not None
    detail = WorkoutService(db).get_workout_by_id(workout.id, user.id)
    assert all(s.completed for g in detail.exercises for s in g.sets)
    assert sum(len(g.sets) for g in detail.exercises) == 3
    assert [g.sets[0].weight_kg for g in detail.exercises] == [100.0, 80.0, None]


def test_relogging_against_the_database_keeps_rows_in_step(db, make_user, exercises):
    user = make_user()
    routine = RoutineService(db).create_routine(user.id, RoutineCreate(title="Pull", exercises=[
        RoutineExerciseCreate(exercise_id=exercises["row"].id, sets="2"),
        RoutineExerciseCreate(exercise_id=exercises["squat"].id, sets="2"),
        RoutineExerciseCreate(exercise_id=exercises["press"].id, sets="2"),
    ]))
    workout = WorkoutService(db).create_workout(user.id, WorkoutCreate(routine_id=routine.id))
    loop_threads, db_threads = set(), set()

    def session_factory():
        db_threads.add(threading.get_ident())
        return SessionLocal()

    async def scenario():
        loop_threads.add(threading.get_ident())
        controller, _ = make_controller(ServiceGateway(user.id, session_factory), workout_id=workout.id)
        await controller.load()
        await controller.log_current_set(weight="60", reps="5")
        controller.navigate_to_exercise(0)
        await controller.log_current_set(reps="7")
        relogged = controller.state
        assert await controller.add_exercise(custom_exercise_name="Face Pull", set_count=2)
        return relogged

    relogged = asyncio.run(scenario())

    db.expire_all()
    detail = WorkoutService(db).get_workout_by_id(workout.id, user.id)
    stored = [[(s.set_number, s.reps, s.weight_kg) for s in g.sets] for g in detail.exercises]
    local = [[(s.set_number, s.reps, s.weight_kg) for s in e.slots] for e in relogged.exercises]
    assert stored[:3] == local
    assert stored[0] == [(1, 7, None), (2, None, None)]
    assert detail.exercises[-1].exercise_name == "Face Pull"
    assert [s.set_number for s in detail.exercises[-1].sets] == [1, 2]
    assert db_threads and not db_threads & loop_threads
