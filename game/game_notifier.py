import asyncio
import logging
from collections import Counter
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

import config
from dto.lobby_dto import ColorType
from game.host import PlayerControl

logger = logging.getLogger(__name__)


class SystemNotifier:
    """Сервис отправки сообщений от имени "системы"

    Сообщение отправляется через игрока, которого на время отправки
    переименовывают и перекрашивают в системные имя и цвет.
    """

    def __init__(self, name: str = config.SYSTEM_NAME, color: ColorType = config.SYSTEM_COLOR):
        self.name = name
        self.color = color
        # Одна маскировка на игрока за раз
        self._locks: Dict[int, asyncio.Lock] = {}
        self._lock_users: Counter = Counter()

    # ===== Маскировка =====

    @asynccontextmanager
    async def disguised(self, player: PlayerControl) -> AsyncIterator[PlayerControl]:
        """Временная маскировка игрока; имя и цвет восстанавливаются всегда"""
        original_name = player.name
        original_color = player.color
        try:
            await player.set_color(self.color)
            await player.set_name(self.name)
            yield player
        finally:
            try:
                await player.set_color(original_color)
            finally:
                await player.set_name(original_name)

    # ===== Отправка =====

    async def send_system_message(self, player: PlayerControl, text: str) -> bool:
        """Отправка сообщения в чат от системного имени"""
        user_id = player.user_id
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_users[user_id] += 1
        try:
            async with lock, self.disguised(player):
                await player.send_chat(text)
            return True
        except Exception:
            logger.exception(f"Не удалось отправить системное сообщение через {player.name}")
            return False
        finally:
            self._lock_users[user_id] -= 1
            if self._lock_users[user_id] <= 0:
                del self._lock_users[user_id]
                del self._locks[user_id]
