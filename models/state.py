from datetime import date
from typing import Literal, Optional, Union

from pydantic import BaseModel

from models.enums import CreateExerciseStep, FlowType, HistoryStep, SetStep


class SetLoggingState(BaseModel):
    """Progress of an AddExercise or AddSet conversation."""
    flow: Literal[FlowType.ADD_EXERCISE, FlowType.ADD_SET]

    # Track what the bot is currently asking the user for
    step: SetStep = SetStep.SELECTING_EXERCISE

    # Values collected so far
    exercise_id: Optional[int] = None
    exercise_name: Optional[str] = None
    weight: Optional[float] = None


class CreateExerciseState(BaseModel):
    """Progress of a CreateExercise conversation."""
    flow: Literal[FlowType.CREATE_EXERCISE] = FlowType.CREATE_EXERCISE
    step: CreateExerciseStep = CreateExerciseStep.AWAITING_NAME
    name: Optional[str] = None


class HistoryState(BaseModel):
    """Progress of a custom date or date range history request."""
    flow: Literal[FlowType.HISTORY] = FlowType.HISTORY
    step: HistoryStep = HistoryStep.AWAITING_DATE
    start_day: Optional[date] = None


# The single session slot of a user holds exactly one of these.
FlowState = Union[SetLoggingState, CreateExerciseState, HistoryState]
