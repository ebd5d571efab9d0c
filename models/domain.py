"""Pydantic models representing the stored entities of the workout diary."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Exercise(BaseModel):
    """An exercise from the shared catalog."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    category: Optional[str] = None
    created_at: Optional[datetime] = None


class TodayExercise(BaseModel):
    """An exercise the user already trained today, with its latest set."""
    exercise: Exercise
    last_weight: float
    last_reps: int
    set_count: int


class SetRecord(BaseModel):
    """A set joined with its exercise name, as shown in the history."""
    exercise_name: str
    weight: float
    reps: int
    set_number: int = 1
    created_at: datetime

    @property
    def day(self) -> date:
        return self.created_at.date()
