import logging
from typing import Optional

import config
from game.event_listener import LobbyCommandListener
from game.game_notifier import SystemNotifier
from lobby.command_parser import CommandParser
from lobby.lobby_manager import LobbyManager
from lobby.settings_controller import LobbySettingsController

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Контейнер сервисов с правильным управлением зависимостями"""

    _instance: Optional['ServiceContainer'] = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            logger.info("Инициализация ServiceContainer...")

            self.lobby_manager = LobbyManager()

            self.parser = CommandParser(config.COMMAND_PREFIX)
            self.controller = LobbySettingsController(prefix=config.COMMAND_PREFIX)
            self.notifier = SystemNotifier()
            self.listener = LobbyCommandListener(
                self.parser, self.controller, self.notifier, config.WELCOME_DELAY
            )

            self._initialized = True
            logger.info("ServiceContainer инициализирован")
