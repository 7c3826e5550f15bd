from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any


class MapType(Enum):
    SKELD = 0
    MIRAHQ = 1
    POLUS = 2
    DLEKS = 3
    AIRSHIP = 4

    @property
    def display_name(self) -> str:
        return _MAP_DISPLAY_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> "MapType":
        """Поиск карты по имени без учета регистра"""
        key = name.strip().upper()
        if key not in cls.__members__:
            raise ValueError(f"unknown map: {name!r}")
        return cls[key]


_MAP_DISPLAY_NAMES = {
    MapType.SKELD: "Skeld",
    MapType.MIRAHQ: "MiraHQ",
    MapType.POLUS: "Polus",
    MapType.DLEKS: "Dleks",
    MapType.AIRSHIP: "Airship",
}


class ColorType(Enum):
    RED = 0
    BLUE = 1
    GREEN = 2
    PINK = 3
    ORANGE = 4
    YELLOW = 5
    BLACK = 6
    WHITE = 7
    PURPLE = 8
    BROWN = 9
    CYAN = 10
    LIME = 11


class GamePhase(Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"


@dataclass
class LobbySettings:
    # Начальные значения задаются в config (DEFAULT_IMPOSTORS, DEFAULT_MAX_PLAYERS)
    num_impostors: int
    max_players: int
    map: MapType = MapType.SKELD


@dataclass
class LobbyDTO:
    code: str
    chat_id: int
    phase: str
    host_id: int
    settings: LobbySettings
    players: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def current_players(self) -> int:
        return len(self.players)
