import logging
from datetime import datetime
from typing import Callable, Optional

from bot import messages
from models.enums import CallbackPrefix, MenuAction
from models.replies import Reply
from services.database_service import WorkoutDatabase
from services.errors import PersistenceError, UserNotFoundError
from services.exercise_flow_service import CreateExerciseFlow
from services.history_service import HistoryFlow
from services.input_parser import InputParser
from services.session_registry import SessionRegistry
from services.set_flow_service import AddExerciseFlow, AddSetFlow

logger = logging.getLogger(__name__)


class ConversationService:
    """
    Owns the session registry and routes every inbound event to a flow.

    Every public method returns a Reply. A store failure while handling an
    event is logged, the user's session is dropped and a generic reply is
    returned, so the next event starts from a clean slate.
    """

    def __init__(self, db: WorkoutDatabase, sessions: Optional[SessionRegistry] = None,
            clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.sessions = sessions if sessions is not None else SessionRegistry()
        parser = InputParser()
        self.add_exercise = AddExerciseFlow(db, self.sessions, parser, clock)
        self.add_set = AddSetFlow(db, self.sessions, parser, clock)
        self.create_exercise = CreateExerciseFlow(db, self.sessions, parser)
        self.history = HistoryFlow(db, self.sessions, parser, clock)

        self._flows_by_action = {
            MenuAction.ADD_EXERCISE: self.add_exercise,
            MenuAction.ADD_SET: self.add_set,
            MenuAction.CREATE_EXERCISE: self.create_exercise,
            MenuAction.HISTORY: self.history,
        }
        self._flows_by_prefix = {
            CallbackPrefix.EXERCISE: self.add_exercise,
            CallbackPrefix.ADD_SET: self.add_set,
            CallbackPrefix.HISTORY: self.history,
        }
        self._flows_by_type = {
            flow.flow_type: flow
            for flow in (self.add_exercise, self.add_set, self.create_exercise, self.history)
        }

    # --- Commands ---

    def register_user(self, user_id: int, username: Optional[str] = None,
            first_name: Optional[str] = None) -> Reply:
        """Handles /start: registers the user and shows the main menu."""
        return self._guarded(user_id, lambda: self._register(user_id, username, first_name))

    def help(self) -> Reply:
        return Reply(text=messages.HELP_MESSAGE, show_menu=True)

    def cancel(self, user_id: int) -> Reply:
        if self.sessions.clear(user_id):
            logger.info("User %s cancelled the conversation.", user_id)
            return Reply(text=messages.CANCEL_MESSAGE, show_menu=True)
        return Reply(text=messages.NOTHING_TO_CANCEL, show_menu=True)

    def begin(self, user_id: int, action: MenuAction) -> Reply:
        """Starts the flow behind a command or menu button."""
        if action == MenuAction.HELP:
            return self.help()
        flow = self._flows_by_action[action]
        return self._guarded(user_id, lambda: flow.begin(user_id))

    # --- Inbound events ---

    def handle_callback(self, user_id: int, data: str) -> Reply:
        """Routes an inline button token such as ``addset_3`` to its flow."""
        prefix, _, value = data.partition("_")
        try:
            flow = self._flows_by_prefix[CallbackPrefix(prefix)]
        except ValueError:
            logger.warning("User %s sent unknown callback data '%s'", user_id, data)
            return Reply(text=messages.ERROR_STALE_BUTTON)
        return self._guarded(user_id, lambda: flow.select(user_id, value))

    def handle_text(self, user_id: int, text: str) -> Reply:
        """Routes free text to the flow in the user's session slot, if any."""
        state = self.sessions.get(user_id)
        if state is None:
            return self.help()
        flow = self._flows_by_type[state.flow]
        return self._guarded(user_id, lambda: flow.handle_text(user_id, text))

    # --- Internal Helpers ---

    def _register(self, user_id: int, username: Optional[str], first_name: Optional[str]) -> Reply:
        self.db.create_user(user_id, username, first_name)
        logger.info("User %s sent /start.", user_id)
        return Reply(text=messages.WELCOME_MESSAGE, show_menu=True)

    def _guarded(self, user_id: int, handler: Callable[[], Reply]) -> Reply:
        try:
            return handler()
        except UserNotFoundError as e:
            logger.warning("Unregistered user %s: %s", user_id, e)
            self.sessions.clear(user_id)
            return Reply(text=messages.ERROR_USER_NOT_FOUND)
        except PersistenceError:
            logger.error("Store failure while handling an event for user %s.", user_id, exc_info=True)
            self.sessions.clear(user_id)
            return Reply(text=messages.ERROR_GENERIC)
