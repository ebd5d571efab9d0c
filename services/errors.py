"""Exceptions shared by the store and the conversation flows."""


class WorkoutBotError(Exception):
    """Base class for all errors raised by the workout diary."""


class ValidationError(WorkoutBotError):
    """User input is malformed or out of range. The flow re-prompts."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(WorkoutBotError):
    """A referenced user or exercise does not exist."""


class UserNotFoundError(NotFoundError):
    """The Telegram user never sent /start."""

    def __init__(self, telegram_id: int):
        super().__init__(f"User {telegram_id} is not registered")
        self.telegram_id = telegram_id


class DuplicateError(WorkoutBotError):
    """A value that must be unique already exists."""


class DuplicateNameError(DuplicateError):
    """An exercise with the same name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Exercise '{name}' already exists")
        self.name = name


class PersistenceError(WorkoutBotError):
    """The store failed unexpectedly."""
