import logging

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    MessageHandler,
    filters,
)

import config
from ServiceController import ServiceContainer
from handlers.base_command import (
    chat_message,
    end_game,
    help_command,
    join,
    leave,
    lobby_info,
    new_lobby,
    start,
    start_game,
)

# Включаем логирование
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO,
    filename=config.LOG_FILE
)
logging.getLogger('httpx').setLevel(logging.WARNING)  # убираем лишние логи
logger = logging.getLogger(__name__)


async def shutdown(application: Application) -> None:
    """Дожидаемся незавершенных команд лобби"""
    await ServiceContainer().listener.drain()


def main() -> None:
    """Запуск бота."""
    if not config.BOT_TOKEN:
        raise SystemExit("BOT_TOKEN is not set")

    # Инициализация
    ServiceContainer()

    application = (
        Application.builder().token(config.BOT_TOKEN).post_shutdown(shutdown).build()
    )
    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("newlobby", new_lobby))
    application.add_handler(CommandHandler("join", join))
    application.add_handler(CommandHandler("leave", leave))
    application.add_handler(CommandHandler("startgame", start_game))
    application.add_handler(CommandHandler("endgame", end_game))
    application.add_handler(CommandHandler("lobby", lobby_info))

    # Все остальные текстовые сообщения, включая команды лобби с префиксом
    application.add_handler(MessageHandler(filters.TEXT, chat_message))

    logger.info("Бот запущен")
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
