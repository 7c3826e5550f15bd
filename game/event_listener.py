import asyncio
import logging
from typing import Coroutine, Optional, Set

import config
from dto.lobby_dto import GamePhase
from game.game_notifier import SystemNotifier
from game.host import GameLobby, PlayerControl
from lobby.command_parser import Command, CommandParser
from lobby.settings_controller import LobbySettingsController

logger = logging.getLogger(__name__)


class LobbyCommandListener:
    """Точка входа для событий хоста: создание лобби и сообщения чата.

    Обработчики событий синхронные и только ставят задачу в цикл событий,
    поэтому поток доставки событий не блокируется. Блокировок вокруг
    настроек лобби нет: при одновременных командах побеждает последняя запись.
    """

    def __init__(
            self,
            parser: CommandParser,
            controller: LobbySettingsController,
            notifier: SystemNotifier,
            welcome_delay: float = config.WELCOME_DELAY,
    ):
        self.parser = parser
        self.controller = controller
        self.notifier = notifier
        self.welcome_delay = welcome_delay
        self._tasks: Set[asyncio.Task] = set()

    # ===== События хоста =====

    def on_lobby_created(self, lobby: GameLobby) -> Optional[asyncio.Task]:
        """Отложенное приветствие со справкой"""
        if lobby.phase != GamePhase.NOT_STARTED:
            return None

        return self._spawn(self._show_welcome(lobby))

    def on_chat_message(
            self,
            lobby: GameLobby,
            sender: PlayerControl,
            is_sender_host: bool,
            message: str,
    ) -> Optional[asyncio.Task]:
        """Запуск обработки команды, если сообщение адресовано нам"""
        if lobby.phase != GamePhase.NOT_STARTED or not is_sender_host:
            return None

        command = self.parser.parse(message)
        if command is None:
            return None

        return self._spawn(self.evaluate(lobby, sender, command, message))

    # ===== Задачи =====

    async def evaluate(
            self, lobby: GameLobby, sender: PlayerControl, command: Command, message: str
    ) -> None:
        logger.debug(
            f"Attempting to evaluate command from {sender.name} on {lobby.code}. "
            f"Message was: {message}"
        )

        try:
            result = self.controller.evaluate(
                command,
                lobby.settings,
                lobby.settings.max_players,
                sender_name=sender.name,
                lobby_code=lobby.code,
            )

            await self.notifier.send_system_message(sender, result.response)

            if result.sync:
                await lobby.sync_settings()
        except Exception:
            logger.exception(f"Ошибка обработки команды {command.name!r} в лобби {lobby.code}")

    async def _show_welcome(self, lobby: GameLobby) -> None:
        await asyncio.sleep(self.welcome_delay)

        # Игра могла начаться, пока мы ждали
        if lobby.phase != GamePhase.NOT_STARTED:
            logger.debug(f"Лобби {lobby.code} уже не в ожидании, приветствие пропущено")
            return

        if not lobby.players:
            logger.debug(f"Лобби {lobby.code} опустело, приветствие пропущено")
            return

        try:
            await self.notifier.send_system_message(
                lobby.host, self.controller.help_text(lobby.settings.max_players)
            )
        except Exception:
            logger.exception(f"Ошибка отправки приветствия в лобби {lobby.code}")

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Ожидание всех запущенных задач"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
