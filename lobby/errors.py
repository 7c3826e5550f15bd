class LobbyCommandError(Exception):
    """Ошибка пользовательского ввода; текст уходит в чат как ответ"""

    # Пересылать ли настройки клиентам даже при ошибке
    sync = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UsageError(LobbyCommandError):
    """Неверное количество аргументов"""


class ParseError(LobbyCommandError):
    """Аргумент не приводится к нужному типу"""


class RangeError(LobbyCommandError):
    """Значение вне допустимых границ"""

    sync = True


class UnknownCommandError(LobbyCommandError):
    """Неизвестная команда"""

    def __init__(self, message: str, command_name: str):
        super().__init__(message)
        self.command_name = command_name
