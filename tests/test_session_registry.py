from datetime import date

from conftest import FakeTimer
from models.enums import CreateExerciseStep, FlowType, HistoryStep, SetStep
from models.state import CreateExerciseState, HistoryState, SetLoggingState
from services.session_registry import SessionRegistry

USER = 1
OTHER = 2


def test_start_and_get():
    registry = SessionRegistry()
    state = registry.start(USER, CreateExerciseState())

    assert registry.get(USER) is state
    assert registry.get(USER, FlowType.CREATE_EXERCISE) is state
    assert registry.get(USER, FlowType.HISTORY) is None
    assert registry.get(OTHER) is None


def test_is_active_per_flow():
    registry = SessionRegistry()
    registry.start(USER, SetLoggingState(flow=FlowType.ADD_SET))

    assert registry.is_active(USER)
    assert registry.is_active(USER, FlowType.ADD_SET)
    assert not registry.is_active(USER, FlowType.ADD_EXERCISE)
    assert not registry.is_active(OTHER)


def test_starting_a_flow_cancels_the_previous_one():
    registry = SessionRegistry()
    registry.start(USER, SetLoggingState(flow=FlowType.ADD_SET, step=SetStep.AWAITING_WEIGHT, exercise_id=3))
    registry.start(USER, CreateExerciseState())

    assert not registry.is_active(USER, FlowType.ADD_SET)
    assert registry.is_active(USER, FlowType.CREATE_EXERCISE)
    assert len(registry) == 1


def test_users_do_not_share_slots():
    registry = SessionRegistry()
    registry.start(USER, CreateExerciseState())
    registry.start(OTHER, HistoryState())

    assert registry.get(USER).flow == FlowType.CREATE_EXERCISE
    assert registry.get(OTHER).flow == FlowType.HISTORY


def test_update_in_place():
    registry = SessionRegistry()
    registry.start(USER, CreateExerciseState())

    def set_name(state):
        state.name = "Выпады"
        state.step = CreateExerciseStep.AWAITING_CATEGORY

    updated = registry.update(USER, set_name)

    assert updated.name == "Выпады"
    assert registry.get(USER).step == CreateExerciseStep.AWAITING_CATEGORY


def test_update_with_replacement():
    registry = SessionRegistry()
    registry.start(USER, HistoryState(step=HistoryStep.AWAITING_RANGE_START))

    registry.update(USER, lambda s: HistoryState(step=HistoryStep.AWAITING_RANGE_END, start_day=date(2024, 7, 1)))

    assert registry.get(USER).start_day == date(2024, 7, 1)


def test_update_without_session():
    registry = SessionRegistry()
    assert registry.update(USER, lambda s: None) is None
    assert registry.get(USER) is None


def test_clear():
    registry = SessionRegistry()
    registry.start(USER, CreateExerciseState())

    assert not registry.clear(USER, FlowType.HISTORY)
    assert registry.is_active(USER)
    assert registry.clear(USER)
    assert not registry.is_active(USER)
    assert not registry.clear(USER)


def test_idle_sessions_expire():
    timer = FakeTimer()
    registry = SessionRegistry(idle_timeout=60, timer=timer)
    registry.start(USER, CreateExerciseState())

    timer.value = 59
    assert registry.is_active(USER)

    timer.value = 61
    assert not registry.is_active(USER)


def test_update_restarts_idle_timer():
    timer = FakeTimer()
    registry = SessionRegistry(idle_timeout=60, timer=timer)
    registry.start(USER, CreateExerciseState())

    timer.value = 50
    registry.update(USER, lambda s: None)
    timer.value = 100

    assert registry.is_active(USER)
