from typing import List, Protocol

from dto.lobby_dto import ColorType, GamePhase, LobbySettings


class PlayerControl(Protocol):
    """Игрок на стороне хоста: имя, цвет и отправка сообщений в чат"""

    user_id: int

    @property
    def name(self) -> str: ...

    @property
    def color(self) -> ColorType: ...

    async def set_name(self, name: str) -> None: ...

    async def set_color(self, color: ColorType) -> None: ...

    async def send_chat(self, text: str) -> None: ...


class GameLobby(Protocol):
    """Лобби на стороне хоста"""

    code: str
    phase: GamePhase
    settings: LobbySettings

    @property
    def host(self) -> PlayerControl: ...

    @property
    def players(self) -> List[PlayerControl]: ...

    async def sync_settings(self) -> None: ...
