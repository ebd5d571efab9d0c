import logging
import os

from pydantic import ValidationError
from telegram import Update
from telegram.ext import Application

from bot.handlers import error_handler, get_handlers, register_commands
from config import Settings
from services.conversation_service import ConversationService
from services.database_service import WorkoutDatabase
from services.errors import PersistenceError
from services.session_registry import SessionRegistry

# --- Setup Logging ---
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def main() -> None:
    """Instantiates dependencies based on environment and starts the bot."""

    # --- Environment Selection ---
    env = os.getenv('BOT_ENV', 'local')
    logger.info("Starting bot in '%s' environment.", env)

    try:
        settings = Settings.load(env)
    except FileNotFoundError as e:
        logger.critical("Configuration Error: %s. Ensure config-%s.yaml exists.", e, env)
        raise SystemExit(1)
    except ValidationError as e:
        logger.critical("Invalid configuration (is the bot token set?): %s", e)
        raise SystemExit(1)

    try:
        db = WorkoutDatabase(settings.database.path)
    except PersistenceError:
        logger.critical("Failed to open the database. Bot cannot start.", exc_info=True)
        raise SystemExit(1)

    sessions = SessionRegistry(
        idle_timeout=settings.sessions.idle_timeout_seconds,
        max_sessions=settings.sessions.max_sessions,
    )
    conversation = ConversationService(db, sessions)

    async def close_database(application: Application) -> None:
        db.close()

    # --- Create the Telegram Application ---
    application = (
        Application.builder()
        .token(settings.bot.telegram_token)
        .post_init(register_commands)
        .post_shutdown(close_database)
        .build()
    )

    # --- Register Handlers ---
    for handler in get_handlers(conversation, settings.history.max_message_length):
        application.add_handler(handler)
    application.add_error_handler(error_handler)

    logger.info("Bot is ready and listening for commands.")
    # run_polling stops on SIGINT/SIGTERM and then runs post_shutdown.
    application.run_polling(allowed_updates=Update.ALL_TYPES)
    logger.info("Bot stopped.")


if __name__ == "__main__":
    main()
