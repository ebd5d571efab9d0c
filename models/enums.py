"""Contains all the Enum definitions for the application domain."""

from enum import Enum


class MenuAction(str, Enum):
    """Top-level actions reachable from commands or the main menu keyboard."""
    ADD_EXERCISE = "add"
    ADD_SET = "addset"
    CREATE_EXERCISE = "create"
    HISTORY = "history"
    HELP = "help"


class FlowType(str, Enum):
    """Conversational flows that can occupy a user's session slot."""
    ADD_EXERCISE = "add_exercise"
    ADD_SET = "add_set"
    CREATE_EXERCISE = "create_exercise"
    HISTORY = "history"


class CallbackPrefix(str, Enum):
    """Prefixes of inline button tokens, one per flow that uses buttons."""
    EXERCISE = "exercise"
    ADD_SET = "addset"
    HISTORY = "history"

    def token(self, value) -> str:
        """Builds a callback token such as ``exercise_12``."""
        return f"{self.value}_{value}"


class HistoryPeriod(str, Enum):
    """Choices offered by the history menu."""
    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK_AGO = "week_ago"
    CUSTOM_DATE = "custom_date"
    RANGE = "period"

    @property
    def days_back(self) -> int | None:
        """Offset in days for the presets, None for choices that ask for dates."""
        return {
            HistoryPeriod.TODAY: 0,
            HistoryPeriod.YESTERDAY: 1,
            HistoryPeriod.WEEK_AGO: 7,
        }.get(self)


class SetStep(str, Enum):
    SELECTING_EXERCISE = "selecting_exercise"
    AWAITING_WEIGHT = "awaiting_weight"
    AWAITING_REPS = "awaiting_reps"


class CreateExerciseStep(str, Enum):
    AWAITING_NAME = "awaiting_name"
    AWAITING_CATEGORY = "awaiting_category"


class HistoryStep(str, Enum):
    AWAITING_DATE = "awaiting_date"
    AWAITING_RANGE_START = "awaiting_range_start"
    AWAITING_RANGE_END = "awaiting_range_end"
