import logging
import os
from typing import Optional

from dotenv import load_dotenv

from dto.lobby_dto import ColorType

logger = logging.getLogger(__name__)

load_dotenv()


def _env_float(name: str, default: float) -> float:
    """Чтение числа из окружения с откатом на значение по умолчанию"""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Некорректное значение {name}={raw!r}, используется {default}")
        return default


BOT_TOKEN: Optional[str] = os.getenv("BOT_TOKEN")
LOG_FILE: str = os.getenv("LOG_FILE", "logs.log")

COMMAND_PREFIX: str = os.getenv("LC_COMMAND_PREFIX", "/lc")

# Границы настроек лобби
MIN_IMPOSTORS = 1
MIN_PLAYERS = 4
ABSOLUTE_MAX_PLAYERS = 128

# Значения нового лобби
DEFAULT_MAX_PLAYERS = 10
DEFAULT_IMPOSTORS = 2

# Приветствие после создания лобби
WELCOME_DELAY: float = _env_float("LC_WELCOME_DELAY", 1.0)

# "Системный" отправитель
SYSTEM_NAME = "LobbyCommands"
SYSTEM_COLOR = ColorType.WHITE
