import logging
from typing import List

from telegram import BotCommand, Update
from telegram.ext import (
    Application,
    BaseHandler,
    CallbackContext,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from bot.keyboards import create_inline_keyboard, create_main_menu_keyboard, menu_action_for
from models.enums import CallbackPrefix, MenuAction
from models.replies import Reply
from services.conversation_service import ConversationService
from services.formatting import MAX_MESSAGE_LENGTH

logger = logging.getLogger(__name__)

BOT_COMMANDS = [
    BotCommand("start", "Start using the bot"),
    BotCommand("add", "Log an exercise"),
    BotCommand("addset", "Add a set to an exercise"),
    BotCommand("history", "Training history"),
    BotCommand("create", "Create a new exercise"),
    BotCommand("cancel", "Abort the current action"),
    BotCommand("help", "Help"),
]


# --- Helper Functions ---

async def _send_reply(update: Update, reply: Reply, max_length: int = MAX_MESSAGE_LENGTH):
    """Sends a reply, editing the pressed message for button presses."""
    chunks = reply.chunks(max_length)
    keyboard = create_inline_keyboard(reply.buttons)
    if keyboard is None and reply.show_menu:
        keyboard = create_main_menu_keyboard()

    if update.callback_query and not reply.show_menu:
        first, rest = chunks[0], chunks[1:]
        await update.callback_query.edit_message_text(
            first, reply_markup=keyboard if not rest else None
        )
        for i, chunk in enumerate(rest, start=1):
            markup = keyboard if i == len(rest) else None
            await update.effective_message.reply_text(chunk, reply_markup=markup)
        return

    for i, chunk in enumerate(chunks, start=1):
        markup = keyboard if i == len(chunks) else None
        await update.effective_message.reply_text(chunk, reply_markup=markup)


# --- Command Handlers ---

async def start_command(update: Update, context: CallbackContext, conversation: ConversationService):
    """Registers the user and shows the welcome message with the main menu."""
    user = update.effective_user
    reply = conversation.register_user(user.id, user.username, user.first_name)
    await _send_reply(update, reply)


async def menu_command(update: Update, context: CallbackContext, conversation: ConversationService,
        action: MenuAction):
    """Starts the flow behind /add, /addset, /create, /history or /help."""
    user_id = update.effective_user.id
    logger.debug("User %s invoked %s", user_id, action.value)
    await _send_reply(update, conversation.begin(user_id, action))


async def cancel_command(update: Update, context: CallbackContext, conversation: ConversationService):
    """Cancels whatever flow the user is in."""
    await _send_reply(update, conversation.cancel(update.effective_user.id))


# --- Button & Text Handlers ---

async def button_pressed(update: Update, context: CallbackContext, conversation: ConversationService,
        max_length: int):
    """Handles inline keyboard presses."""
    query = update.callback_query
    await query.answer()
    logger.debug("User %s pressed '%s'", query.from_user.id, query.data)
    reply = conversation.handle_callback(query.from_user.id, query.data)
    await _send_reply(update, reply, max_length)


async def text_received(update: Update, context: CallbackContext, conversation: ConversationService,
        max_length: int):
    """Handles menu labels and free-text answers to the current prompt."""
    user_id = update.effective_user.id
    text = update.message.text

    action = menu_action_for(text)
    if action is not None:
        reply = conversation.begin(user_id, action)
    else:
        reply = conversation.handle_text(user_id, text)
    await _send_reply(update, reply, max_length)


async def error_handler(update: object, context: CallbackContext):
    """Logs errors raised while processing an update; polling continues."""
    logger.error("Exception while handling update %s", update, exc_info=context.error)


def get_handlers(conversation: ConversationService, max_length: int = MAX_MESSAGE_LENGTH) -> List[BaseHandler]:
    """Creates and returns all handlers of the bot."""

    # --- Handler setup using lambdas for dependency injection ---
    def menu(action: MenuAction):
        return lambda u, c: menu_command(u, c, conversation=conversation, action=action)

    callback_pattern = "^(" + "|".join(prefix.value for prefix in CallbackPrefix) + ")_"

    return [
        CommandHandler("start", lambda u, c: start_command(u, c, conversation=conversation)),
        CommandHandler("cancel", lambda u, c: cancel_command(u, c, conversation=conversation)),
        *[CommandHandler(action.value, menu(action)) for action in MenuAction],
        CallbackQueryHandler(
            lambda u, c: button_pressed(u, c, conversation=conversation, max_length=max_length),
            pattern=callback_pattern,
        ),
        MessageHandler(
            filters.TEXT & ~filters.COMMAND,
            lambda u, c: text_received(u, c, conversation=conversation, max_length=max_length),
        ),
    ]


async def register_commands(application: Application) -> None:
    """Publishes the command list shown in the Telegram client."""
    await application.bot.set_my_commands(BOT_COMMANDS)
    logger.info("Registered %d bot commands.", len(BOT_COMMANDS))
