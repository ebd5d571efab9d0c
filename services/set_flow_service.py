import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from bot import messages
from models.domain import Exercise
from models.enums import CallbackPrefix, FlowType, SetStep
from models.replies import Button, Reply
from models.state import SetLoggingState
from services.database_service import WorkoutDatabase
from services.errors import ValidationError
from services.formatting import chunk_list, format_weight
from services.input_parser import MAX_INTEGER, InputParser
from services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

BUTTONS_PER_ROW = 2


class SetLoggingFlow:
    """
    Select an exercise, then ask for weight and reps and store the set.

    Subclasses decide which exercises are offered and which set number the
    stored set gets.
    """

    flow_type: FlowType
    prefix: CallbackPrefix

    def __init__(self, db: WorkoutDatabase, sessions: SessionRegistry, input_parser: InputParser,
            clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.sessions = sessions
        self.input_parser = input_parser
        self.clock = clock

    # --- Entry ---

    def begin(self, user_id: int) -> Reply:
        raise NotImplementedError

    # --- SELECTING_EXERCISE ---

    def select(self, user_id: int, value: str) -> Reply:
        """Handles an exercise button press."""
        exercise = self._resolve_exercise(value)
        if exercise is None:
            logger.warning("User %s selected unknown exercise '%s'", user_id, value)
            return Reply(text=messages.ERROR_EXERCISE_NOT_FOUND)

        state = SetLoggingState(
            flow=self.flow_type,
            step=SetStep.AWAITING_WEIGHT,
            exercise_id=exercise.id,
            exercise_name=exercise.name,
        )
        self.sessions.start(user_id, state)
        logger.info("User %s selected '%s' in %s", user_id, exercise.name, self.flow_type.value)

        prompt = messages.PROMPT_WEIGHT.format(
            exercise_name=exercise.name, last_set=self._last_set_info(user_id, exercise)
        )
        return Reply(text=prompt)

    # --- Free text ---

    def handle_text(self, user_id: int, text: str) -> Reply:
        """Processes a message based on the step the user is at."""
        state = self.sessions.get(user_id, self.flow_type)
        if state is None:
            return Reply(text=messages.HELP_MESSAGE)

        if state.step == SetStep.AWAITING_WEIGHT:
            return self._handle_weight(user_id, text)
        if state.step == SetStep.AWAITING_REPS:
            return self._handle_reps(user_id, state, text)
        return Reply(text=messages.PROMPT_PICK_FROM_LIST)

    def _handle_weight(self, user_id: int, text: str) -> Reply:
        try:
            weight = self.input_parser.parse_weight(text)
        except ValidationError as e:
            logger.warning("User %s entered an invalid weight: %s", user_id, e.message)
            return Reply(text=messages.ERROR_INVALID_WEIGHT)

        def to_reps(state: SetLoggingState) -> None:
            state.weight = weight
            state.step = SetStep.AWAITING_REPS

        self.sessions.update(user_id, to_reps)
        return Reply(text=messages.PROMPT_REPS)

    def _handle_reps(self, user_id: int, state: SetLoggingState, text: str) -> Reply:
        try:
            reps = self.input_parser.parse_reps(text)
        except ValidationError as e:
            logger.warning("User %s entered invalid reps: %s", user_id, e.message)
            return Reply(text=messages.ERROR_INVALID_REPS)

        internal_id = self.db.require_user_id(user_id)

        now = self.clock()
        set_number = self._set_number(internal_id, state.exercise_id, now.date())
        self.db.record_set(internal_id, state.exercise_id, state.weight, reps,
                           set_number=set_number, created_at=now)
        self.sessions.clear(user_id)
        logger.info("User %s logged %s: %skg x %s (set %s)",
                    user_id, state.exercise_name, state.weight, reps, set_number)
        return Reply(text=self._saved_message(state, reps, set_number))

    # --- Hooks ---

    def _resolve_exercise(self, value: str) -> Optional[Exercise]:
        try:
            exercise_id = int(value)
        except ValueError:
            return None
        if not 0 < exercise_id <= MAX_INTEGER:
            return None
        return self.db.get_exercise(exercise_id)

    def _last_set_info(self, user_id: int, exercise: Exercise) -> str:
        return ""

    def _set_number(self, internal_id: int, exercise_id: int, day: date) -> int:
        return 1

    def _saved_message(self, state: SetLoggingState, reps: int, set_number: int) -> str:
        raise NotImplementedError

    def _exercise_buttons(self, labelled: List[tuple]) -> List[List[Button]]:
        buttons = [
            Button(label=label, data=self.prefix.token(exercise.id))
            for exercise, label in labelled
        ]
        return chunk_list(buttons, BUTTONS_PER_ROW)


class AddExerciseFlow(SetLoggingFlow):
    """Logs the first set of any exercise from the catalog."""

    flow_type = FlowType.ADD_EXERCISE
    prefix = CallbackPrefix.EXERCISE

    def begin(self, user_id: int) -> Reply:
        exercises = self.db.list_exercises()
        if not exercises:
            return Reply(text=messages.EMPTY_CATALOG)

        self.sessions.start(user_id, SetLoggingState(flow=self.flow_type))
        logger.info("User %s started logging an exercise.", user_id)
        buttons = self._exercise_buttons([(exercise, exercise.name) for exercise in exercises])
        return Reply(text=messages.PROMPT_SELECT_EXERCISE, buttons=buttons)

    def _saved_message(self, state: SetLoggingState, reps: int, set_number: int) -> str:
        return messages.EXERCISE_SAVED.format(
            exercise_name=state.exercise_name, weight=format_weight(state.weight), reps=reps
        )


class AddSetFlow(SetLoggingFlow):
    """Adds another numbered set to an exercise already logged today."""

    flow_type = FlowType.ADD_SET
    prefix = CallbackPrefix.ADD_SET
    NEW_EXERCISE = "new"

    def begin(self, user_id: int) -> Reply:
        internal_id = self.db.require_user_id(user_id)

        todays = self.db.todays_exercises(internal_id, self.clock().date())
        if not todays:
            return Reply(text=messages.NO_EXERCISES_TODAY)

        self.sessions.start(user_id, SetLoggingState(flow=self.flow_type))
        logger.info("User %s started adding a set (%d exercises today).", user_id, len(todays))
        buttons = self._exercise_buttons([
            (item.exercise, messages.TODAY_EXERCISE_LABEL.format(
                exercise_name=item.exercise.name, set_count=item.set_count))
            for item in todays
        ])
        buttons.append([Button(label=messages.ADD_NEW_EXERCISE_LABEL, data=self.prefix.token(self.NEW_EXERCISE))])
        return Reply(text=messages.PROMPT_SELECT_TODAYS_EXERCISE, buttons=buttons)

    def select(self, user_id: int, value: str) -> Reply:
        if value == self.NEW_EXERCISE:
            self.sessions.clear(user_id, self.flow_type)
            return Reply(text=messages.ADD_NEW_EXERCISE_HINT)
        return super().select(user_id, value)

    def _last_set_info(self, user_id: int, exercise: Exercise) -> str:
        internal_id = self.db.get_user_id(user_id)
        if internal_id is None:
            return ""
        for item in self.db.todays_exercises(internal_id, self.clock().date()):
            if item.exercise.id == exercise.id:
                return messages.LAST_SET_INFO.format(weight=format_weight(item.last_weight), reps=item.last_reps)
        return ""

    def _set_number(self, internal_id: int, exercise_id: int, day: date) -> int:
        return self.db.next_set_number(internal_id, exercise_id, day)

    def _saved_message(self, state: SetLoggingState, reps: int, set_number: int) -> str:
        return messages.SET_SAVED.format(
            exercise_name=state.exercise_name,
            set_number=set_number,
            weight=format_weight(state.weight),
            reps=reps,
        )
