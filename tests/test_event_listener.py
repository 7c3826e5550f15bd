import asyncio
import logging

from dto.lobby_dto import ColorType, GamePhase, LobbySettings, MapType


def chat(listener, lobby, sender, is_host, message):
    async def run():
        task = listener.on_chat_message(lobby, sender, is_host, message)
        await listener.drain()
        return task

    return asyncio.run(run())


def test_host_command_is_answered_and_synced(listener, lobby, host):
    task = chat(listener, lobby, host, True, "/lc map airship")

    assert task is not None
    assert lobby.settings.map is MapType.AIRSHIP
    assert host.sent == [("LobbyCommands", ColorType.WHITE, "[00FF00FF]Map has been set to Airship")]
    assert host.name == "Alice"
    assert lobby.sync_count == 1


def test_non_host_is_ignored(listener, lobby, make_player):
    guest = make_player(user_id=2, name="Guest")

    task = chat(listener, lobby, guest, False, "/lc map polus")

    assert task is None
    assert lobby.settings.map is MapType.SKELD
    assert guest.sent == []
    assert lobby.sync_count == 0


def test_started_game_is_ignored(listener, lobby, host):
    lobby.phase = GamePhase.STARTED

    assert chat(listener, lobby, host, True, "/lc help") is None
    assert host.sent == []


def test_plain_chat_is_ignored(listener, lobby, host, caplog):
    caplog.set_level(logging.DEBUG)

    assert chat(listener, lobby, host, True, "gg wp") is None
    assert host.sent == []
    assert [r for r in caplog.records if r.name != "asyncio"] == []


def test_rejected_impostor_change_still_syncs(listener, lobby, host):
    chat(listener, lobby, host, True, "/lc impostors 99")

    assert lobby.settings.num_impostors == 3
    assert host.texts == ["[FF0000FF]Error: Impostor limit can only be within 1 and 3!"]
    assert lobby.sync_count == 1


def test_players_scenario_clamps_impostors(listener, lobby, host):
    chat(listener, lobby, host, True, "/lc players 6")

    assert lobby.settings == LobbySettings(map=MapType.SKELD, num_impostors=2, max_players=6)
    assert "Player limit has been set to 6!" in host.texts[0]
    assert "has been set to 2!" in host.texts[0]
    assert lobby.sync_count == 1


def test_help_does_not_sync(listener, lobby, host):
    chat(listener, lobby, host, True, "/lc help")

    assert host.texts[0].startswith("- Lobby Commands Plugin -")
    assert lobby.sync_count == 0


def test_send_failure_is_swallowed(listener, lobby, make_player, caplog):
    broken = make_player(name="Broken", fail_send=True)

    chat(listener, lobby, broken, True, "/lc impostors 2")

    assert lobby.settings.num_impostors == 2
    assert lobby.sync_count == 1
    assert broken.name == "Broken"
    assert "Не удалось отправить" in caplog.text


def test_sync_failure_is_logged_not_raised(listener, lobby, host, caplog):
    async def failing_sync():
        raise ConnectionError("clients gone")

    lobby.sync_settings = failing_sync

    chat(listener, lobby, host, True, "/lc players 8")

    assert lobby.settings.max_players == 8
    assert "Ошибка обработки команды" in caplog.text


def test_evaluation_is_logged_at_debug(listener, lobby, host, caplog):
    caplog.set_level(logging.DEBUG, logger="game.event_listener")

    chat(listener, lobby, host, True, "/lc help")

    assert "Attempting to evaluate command from Alice on ABCDEF" in caplog.text


def test_welcome_message_after_lobby_creation(listener, lobby, host):
    async def run():
        listener.on_lobby_created(lobby)
        await listener.drain()

    asyncio.run(run())

    assert len(host.sent) == 1
    name, _, text = host.sent[0]
    assert name == "LobbyCommands"
    assert text.startswith("- Lobby Commands Plugin -")
    assert "(1 - 3)" in text


def test_welcome_skipped_if_game_started_during_delay(listener, lobby, host):
    listener.welcome_delay = 0.05

    async def run():
        listener.on_lobby_created(lobby)
        await asyncio.sleep(0)
        lobby.phase = GamePhase.STARTED
        await listener.drain()

    asyncio.run(run())

    assert host.sent == []


def test_no_welcome_for_started_lobby(listener, lobby):
    lobby.phase = GamePhase.STARTED

    async def run():
        return listener.on_lobby_created(lobby)

    assert asyncio.run(run()) is None


def test_commands_run_concurrently(listener, lobby, host):
    async def run():
        listener.on_chat_message(lobby, host, True, "/lc map polus")
        listener.on_chat_message(lobby, host, True, "/lc players 12")
        await listener.drain()

    asyncio.run(run())

    assert lobby.settings.map is MapType.POLUS
    assert lobby.settings.max_players == 12
    assert lobby.sync_count == 2
    assert len(host.sent) == 2


def test_welcome_skipped_if_lobby_emptied_during_delay(listener, lobby, host, caplog):
    listener.welcome_delay = 0.05

    async def run():
        listener.on_lobby_created(lobby)
        await asyncio.sleep(0)
        lobby._players = []
        await listener.drain()

    asyncio.run(run())

    assert host.sent == []
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
