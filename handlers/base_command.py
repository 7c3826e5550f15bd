from telegram import Update
from telegram.ext import ContextTypes
import logging

import config
from ServiceController import ServiceContainer

logger = logging.getLogger(__name__)


def get_services():
    """Ленивая загрузка сервисов"""
    if not hasattr(get_services, "_instance"):
        get_services._instance = ServiceContainer()
    return get_services._instance


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Обработчик команды /start"""
    user = update.effective_user
    await update.message.reply_text(
        f"Hi, {user.first_name}! Add me to a group chat to run a lobby.\n\n"
        "Available commands:\n"
        "/newlobby - Create a lobby in this chat\n"
        "/join - Join the lobby\n"
        "/leave - Leave the lobby\n"
        "/help - Help"
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Справка по командам"""
    services = get_services()
    lobby = services.lobby_manager.get_lobby(update.effective_chat.id)
    player_count = lobby.settings.max_players if lobby else config.DEFAULT_MAX_PLAYERS

    help_text = (
        "📚 Lobby:\n"
        "/newlobby - Create a lobby in this chat\n"
        "/join - Join the lobby\n"
        "/leave - Leave the lobby\n"
        "/lobby - Lobby info\n"
        "/startgame - Start the game (host only)\n"
        "/endgame - Return to the lobby (host only)\n\n"
        "⚙️ Settings (host only, before the game starts):\n"
        f"{services.controller.help_text(player_count)}"
    )

    await update.message.reply_text(help_text)


async def new_lobby(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Создание лобби в текущем чате"""
    services = get_services()
    user = update.effective_user

    result = services.lobby_manager.create_lobby(
        context.bot, update.effective_chat.id, user.id, user.first_name
    )
    await update.message.reply_text(result["message"])

    if result["success"]:
        services.listener.on_lobby_created(result["lobby"])


async def join(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Команда /join"""
    services = get_services()
    user = update.effective_user

    result = services.lobby_manager.join_lobby(
        update.effective_chat.id, user.id, user.first_name
    )
    await update.message.reply_text(result["message"])


async def leave(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Команда /leave для выхода из лобби"""
    services = get_services()

    result = services.lobby_manager.leave_lobby(
        update.effective_chat.id, update.effective_user.id
    )
    await update.message.reply_text(result["message"])


async def start_game(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Команда /startgame"""
    services = get_services()

    result = services.lobby_manager.start_game(
        update.effective_chat.id, update.effective_user.id
    )
    await update.message.reply_text(result["message"])


async def end_game(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Команда /endgame"""
    services = get_services()

    result = services.lobby_manager.end_game(
        update.effective_chat.id, update.effective_user.id
    )
    await update.message.reply_text(result["message"])


async def lobby_info(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Информация о лобби чата"""
    services = get_services()
    info = services.lobby_manager.get_lobby_info(update.effective_chat.id)

    if info is None:
        await update.message.reply_text("❌ There is no lobby in this chat. Use /newlobby")
        return

    players = "\n".join(
        f"{'👑' if p['user_id'] == info.host_id else '👤'} {p['name']} ({p['color'].lower()})"
        for p in info.players
    )
    await update.message.reply_text(
        f"🏠 Lobby {info.code}\n"
        f"📊 Status: {info.phase}\n"
        f"🗺 Map: {info.settings.map.display_name}\n"
        f"🔪 Impostors: {info.settings.num_impostors}\n"
        f"👥 Players: {info.current_players}/{info.settings.max_players}\n\n"
        f"{players}"
    )


async def chat_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Передача сообщений чата обработчику команд лобби"""
    if update.message is None or not update.message.text:
        return

    services = get_services()
    lobby = services.lobby_manager.get_lobby(update.effective_chat.id)
    if lobby is None:
        return

    sender = lobby.get_player(update.effective_user.id)
    if sender is None:
        return

    services.listener.on_chat_message(
        lobby, sender, lobby.host.user_id == sender.user_id, update.message.text
    )
