"""Functions for generating interactive keyboards for the Telegram bot."""

from typing import List, Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup

from bot import messages
from models.enums import MenuAction
from models.replies import Button

# Display labels of the persistent reply keyboard. Routing uses the action only.
MENU_LABELS = {
    MenuAction.ADD_EXERCISE: messages.MENU_ADD_EXERCISE,
    MenuAction.ADD_SET: messages.MENU_ADD_SET,
    MenuAction.HISTORY: messages.MENU_HISTORY,
    MenuAction.HELP: messages.MENU_HELP,
}
_ACTIONS_BY_LABEL = {label: action for action, label in MENU_LABELS.items()}


def menu_action_for(text: str) -> Optional[MenuAction]:
    """Returns the action behind a main menu label, or None for other text."""
    return _ACTIONS_BY_LABEL.get(text.strip())


def create_main_menu_keyboard() -> ReplyKeyboardMarkup:
    """Creates the persistent menu shown under the input field, one button per row."""
    keyboard = [[KeyboardButton(label)] for label in MENU_LABELS.values()]
    return ReplyKeyboardMarkup(keyboard, resize_keyboard=True)


def create_inline_keyboard(rows: List[List[Button]]) -> Optional[InlineKeyboardMarkup]:
    """Converts rows of reply buttons into an inline keyboard, or None if there are none."""
    if not rows:
        return None
    keyboard = [
        [InlineKeyboardButton(button.label, callback_data=button.data) for button in row]
        for row in rows
    ]
    return InlineKeyboardMarkup(keyboard)
