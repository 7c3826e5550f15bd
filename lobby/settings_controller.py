import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict

import config
from dto.lobby_dto import LobbySettings, MapType
from lobby.command_parser import Command, CommandKind
from lobby.errors import (
    LobbyCommandError,
    ParseError,
    RangeError,
    UnknownCommandError,
    UsageError,
)

logger = logging.getLogger(__name__)

# Цветовые теги чата
ERROR = "[FF0000FF]"
SUCCESS = "[00FF00FF]"

COUNTER_NOTE = "Note: The counter will not change until someone joins/leaves!"

_WHOLE_NUMBER = re.compile(r"[+-]?[0-9]+")


def max_impostors(player_count: int) -> int:
    """Максимум предателей для данного количества игроков"""
    return player_count // 3


def map_names() -> str:
    return ", ".join(map_type.display_name for map_type in MapType)


@dataclass
class CommandResult:
    response: str
    mutated: bool = False
    sync: bool = False


class LobbySettingsController:
    """Проверка и применение команд к настройкам лобби.

    Контроллер не хранит состояния между вызовами: настройки и текущее
    количество игроков передаются в каждый вызов evaluate().
    """

    def __init__(
            self,
            prefix: str = config.COMMAND_PREFIX,
            min_impostors: int = config.MIN_IMPOSTORS,
            min_players: int = config.MIN_PLAYERS,
            absolute_max_players: int = config.ABSOLUTE_MAX_PLAYERS,
    ):
        self.prefix = prefix
        self.min_impostors = min_impostors
        self.min_players = min_players
        self.absolute_max_players = absolute_max_players

        self._handlers: Dict[
            CommandKind, Callable[[Command, LobbySettings, int], CommandResult]
        ] = {
            CommandKind.HELP: self._help,
            CommandKind.MAP: self._set_map,
            CommandKind.IMPOSTORS: self._set_impostors,
            CommandKind.PLAYERS: self._set_players,
            CommandKind.UNKNOWN: self._unknown,
        }

        missing = set(CommandKind) - set(self._handlers)
        if missing:
            raise RuntimeError(f"Нет обработчиков для команд: {missing}")

    def help_text(self, player_count: int) -> str:
        """Текст справки с актуальными границами"""
        p = self.prefix
        return (
            "- Lobby Commands Plugin -"
            f"\n{p} help - Lists all available commands"
            "\n"
            f"\n{p} impostors {{limit}} - Set the impostor limit "
            f"({self.min_impostors} - {max_impostors(player_count)})"
            "\n"
            f"\n{p} players {{limit}} - Set the player limit "
            f"({self.min_players} - {self.absolute_max_players})"
            "\n"
            f"\n{p} map {{mapname}} - Set the map ({map_names()})"
        )

    def evaluate(
            self,
            command: Command,
            settings: LobbySettings,
            player_count: int,
            sender_name: str = "",
            lobby_code: str = "",
    ) -> CommandResult:
        """Выполнение команды: ровно один ответ, изменение настроек по необходимости"""
        handler = self._handlers[command.kind]
        try:
            return handler(command, settings, player_count)
        except UnknownCommandError as e:
            logger.info(
                f"Unknown command {e.command_name} from {sender_name} on {lobby_code}."
            )
            return CommandResult(response=e.message)
        except LobbyCommandError as e:
            return CommandResult(response=e.message, sync=e.sync)

    # ===== Обработчики команд =====

    def _help(self, command: Command, settings: LobbySettings, player_count: int) -> CommandResult:
        return CommandResult(response=self.help_text(player_count))

    def _set_map(self, command: Command, settings: LobbySettings, player_count: int) -> CommandResult:
        if len(command.args) != 1:
            raise UsageError(
                f"{self.prefix} map {{mapname}}\n"
                f"Set the current map. Options are: {map_names()}"
            )

        try:
            new_map = MapType.from_name(command.args[0])
        except ValueError:
            raise ParseError(f"{ERROR}Error: Unknown map.")

        settings.map = new_map
        return CommandResult(
            response=f"{SUCCESS}Map has been set to {new_map.display_name}",
            mutated=True,
            sync=True,
        )

    def _set_impostors(self, command: Command, settings: LobbySettings, player_count: int) -> CommandResult:
        upper = max_impostors(player_count)
        if len(command.args) != 1:
            raise UsageError(
                f"{self.prefix} impostors {{limit}} - Set the impostor limit. "
                f"Value must be within {self.min_impostors} and {upper}"
            )

        limit = self._parse_whole_number(command.args[0])
        if limit < self.min_impostors or limit > upper:
            raise RangeError(
                f"{ERROR}Error: Impostor limit can only be within "
                f"{self.min_impostors} and {upper}!"
            )

        limit = max(self.min_impostors, min(limit, upper))
        settings.num_impostors = limit
        return CommandResult(
            response=f"{SUCCESS}Impostor limit has been set to {limit}",
            mutated=True,
            sync=True,
        )

    def _set_players(self, command: Command, settings: LobbySettings, player_count: int) -> CommandResult:
        if len(command.args) != 1:
            raise UsageError(
                f"{self.prefix} players {{limit}} - Set the player limit. "
                f"Value must be within {self.min_players} and {self.absolute_max_players}"
            )

        limit = self._parse_whole_number(command.args[0])
        if limit < self.min_players or limit > self.absolute_max_players:
            raise RangeError(
                f"{ERROR}Error: Player limit can only be within "
                f"{self.min_players} and {self.absolute_max_players}!"
            )

        settings.max_players = limit
        upper = max_impostors(limit)

        if settings.num_impostors > upper:
            settings.num_impostors = upper
            response = (
                f"{SUCCESS}Player limit has been set to {limit}!"
                f"\nImpostor limit was too high for the player limit and has been set to {upper}!"
                f"\n{COUNTER_NOTE}"
            )
        else:
            response = f"{SUCCESS}Player limit has been set to {limit}!\n{COUNTER_NOTE}"

        return CommandResult(response=response, mutated=True, sync=True)

    def _unknown(self, command: Command, settings: LobbySettings, player_count: int) -> CommandResult:
        raise UnknownCommandError(
            f'{ERROR}unknown command: "{command.name}"', command.name
        )

    @staticmethod
    def _parse_whole_number(raw: str) -> int:
        if not _WHOLE_NUMBER.fullmatch(raw):
            raise ParseError(f"{ERROR}Error: Please enter a valid whole number!")
        try:
            return int(raw)
        except ValueError:
            # Слишком длинное число для int()
            raise ParseError(f"{ERROR}Error: Please enter a valid whole number!")
