"""Исключения для работы с Roblox API.

Закрытая иерархия: любая ошибка вызова эндпоинта приводится к одному
из классов ниже. Ошибки аутентификации наследуются от RobloxAuthException.
"""

from enum import Enum


class RobloxException(Exception):
    """Базовое исключение для ошибок Roblox API."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class RobloxAuthException(RobloxException):
    """Исключение при ошибках аутентификации.

    Выбрасывается при:
    - Отсутствии .ROBLOSECURITY для эндпоинта, которому он нужен
    - Недействительном .ROBLOSECURITY (401)
    - Исчерпании retry после обновления x-csrf-token
    """


class AuthenticationRequired(RobloxAuthException):
    """Операции нужен .ROBLOSECURITY, но он не был передан."""

    def __init__(self, message: str = "Не задан .ROBLOSECURITY") -> None:
        super().__init__(message)


class InvalidAuth(RobloxAuthException):
    """Сервер отклонил запрос даже после обновления x-csrf-token."""


class RoblosecurityExpired(RobloxAuthException):
    """Сервер явно сообщил, что .ROBLOSECURITY недействителен (401)."""

    def __init__(self, message: str = "Недействительный .ROBLOSECURITY") -> None:
        super().__init__(message)


class XcsrfNotReturned(RobloxAuthException):
    """403 без нового x-csrf-token и без распознаваемой причины."""

    def __init__(self, message: str = "Сервер не вернул x-csrf-token") -> None:
        super().__init__(message)


class ChallengeRequired(RobloxAuthException):
    """Для запроса нужно пройти капчу или двухэтапную проверку.

    Attributes:
        challenge_id: Идентификатор челленджа из rblx-challenge-metadata
    """

    def __init__(self, challenge_id: str) -> None:
        super().__init__(
            f"Требуется пройти челлендж (challenge_id={challenge_id})"
        )
        self.challenge_id = challenge_id


class XcsrfTokenRejected(RobloxException):
    """Сервер отклонил x-csrf-token и выдал новый.

    Внутренний сигнал RequestExecutor, наружу не выходит.
    """

    def __init__(self, token: str) -> None:
        super().__init__("x-csrf-token отклонён сервером")
        self.token = token


class NetworkError(RobloxException):
    """Ошибка транспорта: соединение, таймаут, TLS."""


class MalformedResponse(RobloxException):
    """Успешный статус, но тело ответа не разбирается в ожидаемую структуру."""

    def __init__(
        self,
        message: str = "Некорректный ответ сервера",
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error=original_error)


class UnknownStatusCode(RobloxException):
    """Код ответа, которого нет в таблице статусов эндпоинта."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Неизвестный код ответа {status_code}")
        self.status_code = status_code


class UnknownStatus403Format(RobloxException):
    """403 с телом ошибки, формат которого не распознан."""

    def __init__(self) -> None:
        super().__init__("Неизвестный формат ответа 403")


class BadRequest(RobloxException):
    """400 без встроенной ошибки Roblox."""

    def __init__(self) -> None:
        super().__init__("Bad Request")


class NotFound(RobloxException):
    """404, объект с таким id не существует."""

    def __init__(self, message: str = "Not Found") -> None:
        super().__init__(message)


class TooManyRequests(RobloxException):
    """429, превышен лимит запросов."""

    def __init__(self) -> None:
        super().__init__("Too Many Requests")


class InternalServerError(RobloxException):
    """500 на стороне Roblox."""

    def __init__(self) -> None:
        super().__init__("Internal Server Error")


class UnknownRobloxErrorCode(RobloxException):
    """Ошибка с кодом Roblox (не HTTP), для которого нет отдельного класса.

    Attributes:
        code: Код ошибки Roblox из тела ответа
        roblox_message: Сообщение Roblox из тела ответа
    """

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"Неизвестный код ошибки Roblox {code}: {message}")
        self.code = code
        self.roblox_message = message


class UserDoesNotOwnAsset(RobloxException):
    """Пользователь не владеет предметом (код ошибки Roblox 9)."""

    def __init__(self) -> None:
        super().__init__("Пользователь не владеет предметом")


class PurchaseTradableLimitedError(RobloxException):
    """Покупка tradable limited отклонена Roblox.

    Attributes:
        reason: Машинная причина из поля reason (может быть пустой)
        roblox_message: Текст ошибки из поля errorMsg
    """

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(f"Покупка не выполнена: {reason or message}")
        self.reason = reason
        self.roblox_message = message


class PurchaseNonTradableLimitedReason(str, Enum):
    """Причины отказа в покупке non-tradable limited."""

    PRICE_MISMATCH = "PriceMismatch"
    SOLD_OUT = "QuantityExhausted"
    UNKNOWN = "Unknown"


class PurchaseNonTradableLimitedError(RobloxException):
    """Покупка non-tradable limited отклонена Roblox.

    Attributes:
        reason: Распознанная причина отказа
        roblox_message: Исходное сообщение Roblox
    """

    def __init__(
        self, reason: PurchaseNonTradableLimitedReason, message: str
    ) -> None:
        super().__init__(f"Покупка не выполнена: {reason.value} ({message})")
        self.reason = reason
        self.roblox_message = message


class InvalidPath(RobloxException):
    """Файл для загрузки не удалось прочитать.

    Attributes:
        path: Путь, переданный вызывающим
    """

    def __init__(self, path: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Не удалось прочитать файл {path}", original_error=original_error)
        self.path = path
