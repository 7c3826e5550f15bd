from typing import List, Optional, Tuple

import pytest

from dto.lobby_dto import ColorType, GamePhase, LobbySettings, MapType
from game.event_listener import LobbyCommandListener
from game.game_notifier import SystemNotifier
from lobby.command_parser import CommandParser
from lobby.settings_controller import LobbySettingsController


class FakePlayer:
    def __init__(self, user_id: int = 1, name: str = "Alice", color: ColorType = ColorType.RED,
                 fail_send: bool = False):
        self.user_id = user_id
        self.name = name
        self.color = color
        self.fail_send = fail_send
        self.sent: List[Tuple[str, ColorType, str]] = []

    async def set_name(self, name: str) -> None:
        self.name = name

    async def set_color(self, color: ColorType) -> None:
        self.color = color

    async def send_chat(self, text: str) -> None:
        if self.fail_send:
            raise ConnectionError("chat is down")
        self.sent.append((self.name, self.color, text))

    @property
    def texts(self) -> List[str]:
        return [text for _, _, text in self.sent]


class FakeLobby:
    def __init__(self, host: FakePlayer, settings: Optional[LobbySettings] = None,
                 code: str = "ABCDEF"):
        self.code = code
        self.phase = GamePhase.NOT_STARTED
        self.settings = settings or LobbySettings(
            map=MapType.SKELD, num_impostors=3, max_players=10
        )
        self._host = host
        self._players = [host]
        self.sync_count = 0

    @property
    def host(self) -> FakePlayer:
        if not self._players:
            raise IndexError("lobby is empty")
        return self._host

    @property
    def players(self) -> List[FakePlayer]:
        return list(self._players)

    async def sync_settings(self) -> None:
        self.sync_count += 1


@pytest.fixture
def host():
    return FakePlayer()


@pytest.fixture
def lobby(host):
    return FakeLobby(host)


@pytest.fixture
def parser():
    return CommandParser("/lc")


@pytest.fixture
def controller():
    return LobbySettingsController(prefix="/lc")


@pytest.fixture
def listener(parser, controller):
    return LobbyCommandListener(parser, controller, SystemNotifier(), welcome_delay=0)


@pytest.fixture
def make_player():
    return FakePlayer
