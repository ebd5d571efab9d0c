import logging

from bot import messages
from models.enums import CreateExerciseStep, FlowType
from models.replies import Reply
from models.state import CreateExerciseState
from services.database_service import WorkoutDatabase
from services.errors import DuplicateNameError, ValidationError
from services.input_parser import InputParser
from services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class CreateExerciseFlow:
    """Asks for a name and a category and adds the exercise to the catalog."""

    flow_type = FlowType.CREATE_EXERCISE

    def __init__(self, db: WorkoutDatabase, sessions: SessionRegistry, input_parser: InputParser):
        self.db = db
        self.sessions = sessions
        self.input_parser = input_parser

    def begin(self, user_id: int) -> Reply:
        self.sessions.start(user_id, CreateExerciseState())
        logger.info("User %s started creating an exercise.", user_id)
        return Reply(text=messages.PROMPT_EXERCISE_NAME)

    def handle_text(self, user_id: int, text: str) -> Reply:
        state = self.sessions.get(user_id, self.flow_type)
        if state is None:
            return Reply(text=messages.HELP_MESSAGE)

        if state.step == CreateExerciseStep.AWAITING_NAME:
            return self._handle_name(user_id, text)
        return self._handle_category(user_id, state, text)

    def _handle_name(self, user_id: int, text: str) -> Reply:
        try:
            name = self.input_parser.parse_label(text)
        except ValidationError:
            return Reply(text=messages.ERROR_NAME_TOO_SHORT)

        if self.db.exercise_exists(name):
            logger.info("User %s proposed existing exercise name '%s'", user_id, name)
            return Reply(text=messages.ERROR_NAME_TAKEN)

        def to_category(state: CreateExerciseState) -> None:
            state.name = name
            state.step = CreateExerciseStep.AWAITING_CATEGORY

        self.sessions.update(user_id, to_category)
        return Reply(text=messages.PROMPT_EXERCISE_CATEGORY)

    def _handle_category(self, user_id: int, state: CreateExerciseState, text: str) -> Reply:
        try:
            category = self.input_parser.parse_label(text)
        except ValidationError:
            return Reply(text=messages.ERROR_CATEGORY_TOO_SHORT)

        try:
            self.db.create_exercise(state.name, category)
        except DuplicateNameError:
            # Someone took the name since it was checked; ask for another one.
            self.sessions.update(user_id, lambda s: CreateExerciseState())
            return Reply(text=messages.ERROR_NAME_TAKEN)

        self.sessions.clear(user_id)
        logger.info("User %s created exercise '%s' in category '%s'", user_id, state.name, category)
        return Reply(text=messages.EXERCISE_CREATED.format(name=state.name, category=category))
