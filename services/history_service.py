"""
Service layer for browsing the training history by day or date range.
"""
import logging
from datetime import date, datetime
from typing import Callable, Dict, List

from dateutil.relativedelta import relativedelta

from bot import messages
from models.domain import SetRecord
from models.enums import CallbackPrefix, FlowType, HistoryPeriod, HistoryStep
from models.replies import Button, Reply
from models.state import HistoryState
from services.database_service import WorkoutDatabase
from services.errors import ValidationError
from services.formatting import format_day, format_time, format_weight
from services.input_parser import InputParser
from services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

PRESET_TITLES = {
    HistoryPeriod.TODAY: messages.TITLE_TODAY,
    HistoryPeriod.YESTERDAY: messages.TITLE_YESTERDAY,
    HistoryPeriod.WEEK_AGO: messages.TITLE_WEEK_AGO,
}


class HistoryFlow:
    """
    Offers preset days, a custom date or a date range, and renders the sets
    logged in that period grouped by day and exercise.
    """

    flow_type = FlowType.HISTORY
    prefix = CallbackPrefix.HISTORY

    def __init__(self, db: WorkoutDatabase, sessions: SessionRegistry, input_parser: InputParser,
            clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.sessions = sessions
        self.input_parser = input_parser
        self.clock = clock

    def begin(self, user_id: int) -> Reply:
        """Shows the period menu. Any flow in progress is abandoned."""
        self.sessions.clear(user_id)
        keyboard = [
            [self._button(messages.HISTORY_TODAY, HistoryPeriod.TODAY),
             self._button(messages.HISTORY_YESTERDAY, HistoryPeriod.YESTERDAY)],
            [self._button(messages.HISTORY_WEEK_AGO, HistoryPeriod.WEEK_AGO)],
            [self._button(messages.HISTORY_CUSTOM_DATE, HistoryPeriod.CUSTOM_DATE),
             self._button(messages.HISTORY_RANGE, HistoryPeriod.RANGE)],
        ]
        return Reply(text=messages.PROMPT_HISTORY_PERIOD, buttons=keyboard)

    def select(self, user_id: int, value: str) -> Reply:
        """Handles a period button press."""
        try:
            period = HistoryPeriod(value)
        except ValueError:
            logger.warning("User %s sent unknown history period '%s'", user_id, value)
            return Reply(text=messages.ERROR_STALE_BUTTON)

        if period == HistoryPeriod.CUSTOM_DATE:
            self.sessions.start(user_id, HistoryState(step=HistoryStep.AWAITING_DATE))
            return Reply(text=messages.PROMPT_DATE)
        if period == HistoryPeriod.RANGE:
            self.sessions.start(user_id, HistoryState(step=HistoryStep.AWAITING_RANGE_START))
            return Reply(text=messages.PROMPT_RANGE_START)

        self.sessions.clear(user_id)
        internal_id = self.db.require_user_id(user_id)

        day = self.clock().date() - relativedelta(days=period.days_back)
        records = self.db.sets_on_date(internal_id, day)
        logger.info("User %s viewed history for %s: %d sets", user_id, day, len(records))
        return self.render(records, PRESET_TITLES[period])

    def handle_text(self, user_id: int, text: str) -> Reply:
        """Processes a typed date according to the step the user is at."""
        state = self.sessions.get(user_id, self.flow_type)
        if state is None:
            return Reply(text=messages.HELP_MESSAGE)

        try:
            day = self.input_parser.parse_date(text)
        except ValidationError as e:
            logger.warning("User %s entered an invalid date: %s", user_id, e.message)
            return Reply(text=messages.ERROR_INVALID_DATE)

        if state.step == HistoryStep.AWAITING_RANGE_START:
            def to_range_end(s: HistoryState) -> None:
                s.start_day = day
                s.step = HistoryStep.AWAITING_RANGE_END

            self.sessions.update(user_id, to_range_end)
            return Reply(text=messages.PROMPT_RANGE_END)

        if state.step == HistoryStep.AWAITING_RANGE_END and day < state.start_day:
            return Reply(text=messages.ERROR_END_BEFORE_START)

        self.sessions.clear(user_id)
        internal_id = self.db.require_user_id(user_id)

        if state.step == HistoryStep.AWAITING_DATE:
            records = self.db.sets_on_date(internal_id, day)
            title = messages.TITLE_DAY.format(day=format_day(day))
        else:
            records = self.db.sets_in_range(internal_id, state.start_day, day)
            title = messages.TITLE_RANGE.format(start=format_day(state.start_day), end=format_day(day))
        logger.info("User %s viewed history '%s': %d sets", user_id, title, len(records))
        return self.render(records, title)

    def render(self, records: List[SetRecord], title: str) -> Reply:
        """
        Formats sets grouped by day (newest first), then by exercise in the
        order they first appear, then by ascending set number.
        """
        if not records:
            return Reply(text=messages.NO_WORKOUTS_FOUND.format(title=title))

        by_day: Dict[date, Dict[str, List[SetRecord]]] = {}
        for record in records:
            by_day.setdefault(record.day, {}).setdefault(record.exercise_name, []).append(record)

        lines = [f"{title}:", ""]
        for day in sorted(by_day, reverse=True):
            lines.append(messages.HISTORY_DAY_HEADER.format(day=format_day(day)))
            for exercise_name, sets in by_day[day].items():
                lines.append(messages.HISTORY_EXERCISE_LINE.format(exercise_name=exercise_name))
                for record in sorted(sets, key=lambda r: r.set_number):
                    line = messages.HISTORY_SET_LINE.format(
                        set_number=record.set_number, weight=format_weight(record.weight), reps=record.reps
                    )
                    time_of_day = format_time(record.created_at)
                    if time_of_day:
                        line += f" ({time_of_day})"
                    lines.append(line)
            lines.append("")
        return Reply(text="\n".join(lines).rstrip())

    def _button(self, label: str, period: HistoryPeriod) -> Button:
        return Button(label=label, data=self.prefix.token(period.value))
