import asyncio
import logging
import re
import secrets
from typing import Optional, Dict, Any, List

from telegram import Bot
from telegram.error import BadRequest

import config
from dto.lobby_dto import ColorType, GamePhase, LobbyDTO, LobbySettings

logger = logging.getLogger(__name__)

# Теги цвета вида [FF0000FF], в Telegram они не отображаются
_COLOR_TAG = re.compile(r"\[[0-9A-Fa-f]{8}\]")


class ChatPlayer:
    """Игрок лобби в групповом чате Telegram"""

    def __init__(self, bot: Bot, chat_id: int, user_id: int, name: str, color: ColorType):
        self.bot = bot
        self.chat_id = chat_id
        self.user_id = user_id
        self._name = name
        self._color = color

    @property
    def name(self) -> str:
        return self._name

    @property
    def color(self) -> ColorType:
        return self._color

    async def set_name(self, name: str) -> None:
        self._name = name

    async def set_color(self, color: ColorType) -> None:
        self._color = color

    async def send_chat(self, text: str) -> None:
        await self.bot.send_message(
            chat_id=self.chat_id, text=f"{self._name}: {_COLOR_TAG.sub('', text)}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"user_id": self.user_id, "name": self._name, "color": self._color.name}


class ChatLobby:
    """Лобби, привязанное к одному групповому чату"""

    def __init__(self, bot: Bot, chat_id: int, code: str, settings: LobbySettings):
        self.bot = bot
        self.chat_id = chat_id
        self.code = code
        self.phase = GamePhase.NOT_STARTED
        self.settings = settings
        self._players: List[ChatPlayer] = []
        self._settings_message_id: Optional[int] = None
        self._sync_lock: Optional[asyncio.Lock] = None

    @property
    def host(self) -> ChatPlayer:
        """Хостом считается первый игрок в списке"""
        return self._players[0]

    @property
    def players(self) -> List[ChatPlayer]:
        return list(self._players)

    def get_player(self, user_id: int) -> Optional[ChatPlayer]:
        for player in self._players:
            if player.user_id == user_id:
                return player
        return None

    def add_player(self, user_id: int, name: str) -> ChatPlayer:
        player = ChatPlayer(self.bot, self.chat_id, user_id, name, self._free_color())
        self._players.append(player)
        return player

    def remove_player(self, user_id: int) -> bool:
        player = self.get_player(user_id)
        if player is None:
            return False
        self._players.remove(player)
        return True

    def _free_color(self) -> ColorType:
        used = {player.color for player in self._players}
        for color in ColorType:
            if color not in used:
                return color
        return list(ColorType)[len(self._players) % len(ColorType)]

    def settings_text(self) -> str:
        return (
            f"⚙️ Lobby {self.code}\n"
            f"Map: {self.settings.map.display_name}\n"
            f"Impostors: {self.settings.num_impostors}\n"
            f"Max players: {self.settings.max_players}"
        )

    async def sync_settings(self) -> None:
        """Публикация текущих настроек: одно сообщение, которое редактируется"""
        if self._sync_lock is None:
            self._sync_lock = asyncio.Lock()

        # Создание и правка сообщения строго по очереди
        async with self._sync_lock:
            text = self.settings_text()

            if self._settings_message_id is None:
                message = await self.bot.send_message(chat_id=self.chat_id, text=text)
                self._settings_message_id = message.message_id
                return

            try:
                await self.bot.edit_message_text(
                    chat_id=self.chat_id, message_id=self._settings_message_id, text=text
                )
            except BadRequest as e:
                if "not modified" not in str(e).lower():
                    raise
                logger.debug(f"Настройки лобби {self.code} не изменились")


class LobbyManager:
    """Лобби в памяти, по одному на чат"""

    def __init__(self):
        self.lobbies: Dict[int, ChatLobby] = {}

    def generate_invite_code(self) -> str:
        """Генерация уникального кода лобби"""
        while True:
            code = secrets.token_urlsafe(8).upper().replace("_", "").replace("-", "")[:8]
            if all(lobby.code != code for lobby in self.lobbies.values()):
                return code

    def get_lobby(self, chat_id: int) -> Optional[ChatLobby]:
        return self.lobbies.get(chat_id)

    def create_lobby(self, bot: Bot, chat_id: int, host_id: int, host_name: str) -> Dict[str, Any]:
        """Создание нового лобби в чате"""
        if chat_id in self.lobbies:
            return {"success": False, "message": "This chat already has a lobby"}

        settings = LobbySettings(
            num_impostors=config.DEFAULT_IMPOSTORS,
            max_players=config.DEFAULT_MAX_PLAYERS,
        )
        lobby = ChatLobby(bot, chat_id, self.generate_invite_code(), settings)
        lobby.add_player(host_id, host_name)
        self.lobbies[chat_id] = lobby

        logger.info(f"Лобби {lobby.code} создано в чате {chat_id}, хост {host_id}")
        return {"success": True, "lobby": lobby, "message": f"Lobby {lobby.code} created"}

    def join_lobby(self, chat_id: int, user_id: int, name: str) -> Dict[str, Any]:
        """Присоединение к лобби чата"""
        lobby = self.get_lobby(chat_id)
        if lobby is None:
            return {"success": False, "message": "There is no lobby in this chat"}

        if lobby.get_player(user_id) is not None:
            return {"success": False, "message": "You are already in this lobby"}

        if lobby.phase != GamePhase.NOT_STARTED:
            return {"success": False, "message": "The game has already started"}

        if len(lobby.players) >= lobby.settings.max_players:
            return {"success": False, "message": "The lobby is full"}

        player = lobby.add_player(user_id, name)
        logger.info(f"Игрок {user_id} присоединился к лобби {lobby.code}")
        return {"success": True, "player": player, "message": f"{name} joined the lobby"}

    def leave_lobby(self, chat_id: int, user_id: int) -> Dict[str, Any]:
        """Выход из лобби; хост передается следующему игроку"""
        lobby = self.get_lobby(chat_id)
        if lobby is None or lobby.get_player(user_id) is None:
            return {"success": False, "message": "You are not in this lobby"}

        was_host = lobby.host.user_id == user_id
        lobby.remove_player(user_id)
        logger.info(f"Игрок {user_id} вышел из лобби {lobby.code}")

        if not lobby.players:
            del self.lobbies[chat_id]
            logger.info(f"Лобби {lobby.code} удалено: игроков не осталось")
            return {"success": True, "lobby_removed": True, "message": "The lobby was closed"}

        result = {"success": True, "lobby_removed": False, "message": "You left the lobby"}
        if was_host:
            result["new_host_id"] = lobby.host.user_id
            result["message"] += f". {lobby.host.name} is the new host"
        return result

    def start_game(self, chat_id: int, user_id: int) -> Dict[str, Any]:
        """Начало игры (только хост)"""
        lobby = self.get_lobby(chat_id)
        if lobby is None:
            return {"success": False, "message": "There is no lobby in this chat"}

        if lobby.host.user_id != user_id:
            return {"success": False, "message": "Only the host can start the game"}

        if lobby.phase != GamePhase.NOT_STARTED:
            return {"success": False, "message": "The game has already started"}

        lobby.phase = GamePhase.STARTED
        logger.info(f"Игра в лобби {lobby.code} начата")
        return {"success": True, "message": "The game has started"}

    def end_game(self, chat_id: int, user_id: int) -> Dict[str, Any]:
        """Возврат лобби в ожидание (только хост)"""
        lobby = self.get_lobby(chat_id)
        if lobby is None:
            return {"success": False, "message": "There is no lobby in this chat"}

        if lobby.host.user_id != user_id:
            return {"success": False, "message": "Only the host can end the game"}

        if lobby.phase != GamePhase.STARTED:
            return {"success": False, "message": "The game is not running"}

        lobby.phase = GamePhase.NOT_STARTED
        logger.info(f"Игра в лобби {lobby.code} завершена")
        return {"success": True, "message": "The game has ended, back to the lobby"}

    def get_lobby_info(self, chat_id: int) -> Optional[LobbyDTO]:
        """Снимок лобби для отображения"""
        lobby = self.get_lobby(chat_id)
        if lobby is None:
            return None

        return LobbyDTO(
            code=lobby.code,
            chat_id=chat_id,
            phase=lobby.phase.value,
            host_id=lobby.host.user_id,
            settings=LobbySettings(
                map=lobby.settings.map,
                num_impostors=lobby.settings.num_impostors,
                max_players=lobby.settings.max_players,
            ),
            players=[player.to_dict() for player in lobby.players],
        )
