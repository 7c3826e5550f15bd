from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class CommandKind(Enum):
    HELP = "help"
    MAP = "map"
    IMPOSTORS = "impostors"
    PLAYERS = "players"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    name: str
    args: Tuple[str, ...] = ()


_KINDS_BY_NAME = {
    kind.value: kind for kind in CommandKind if kind is not CommandKind.UNKNOWN
}


class CommandParser:
    """Разбор сообщений чата в команды"""

    def __init__(self, prefix: str):
        self.prefix = prefix.lower()

    def is_command(self, message: str) -> bool:
        """Начинается ли сообщение с префикса (без учета регистра)"""
        return message.lower().startswith(self.prefix)

    def tokenize(self, message: str) -> List[str]:
        """Разбивает остаток сообщения после префикса на токены.

        Результат никогда не пустой: пустой остаток дает один пустой токен.
        """
        remainder = message[len(self.prefix):]
        if remainder[:1].isspace():
            remainder = remainder[1:]
        return remainder.lower().split() or [""]

    def parse(self, message: str) -> Optional[Command]:
        """Команда из сообщения или None, если сообщение не для нас"""
        if not self.is_command(message):
            return None

        name, *args = self.tokenize(message)
        kind = _KINDS_BY_NAME.get(name, CommandKind.UNKNOWN)
        return Command(kind=kind, name=name, args=tuple(args))
