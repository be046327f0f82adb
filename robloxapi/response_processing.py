"""Разбор ответов Roblox API.

Таблицы статусов, классификация 403 и парсеры успешных ответов.
"""

import base64
import binascii
import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from robloxapi.exceptions import (
    BadRequest,
    ChallengeRequired,
    InternalServerError,
    MalformedResponse,
    NotFound,
    RoblosecurityExpired,
    RobloxException,
    TooManyRequests,
    UnknownRobloxErrorCode,
    UnknownStatus403Format,
    UnknownStatusCode,
    UserDoesNotOwnAsset,
    XcsrfNotReturned,
    XcsrfTokenRejected,
)
from robloxapi.token_manager import XCSRF_HEADER

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorFactory = Callable[[httpx.Response], RobloxException]
StatusTable = Mapping[int, ErrorFactory]
ResponseParser = Callable[[httpx.Response], T]

CHALLENGE_METADATA_HEADER = "rblx-challenge-metadata"
CHALLENGE_REQUIRED_MESSAGE = "Challenge is required to authorize the request"

# Коды ошибок Roblox (не HTTP) внутри тела ответа
XCSRF_ERROR_CODE = 0
USER_DOES_NOT_OWN_ASSET_ERROR_CODE = 9


class RobloxErrorRaw(BaseModel):
    code: int
    message: str = ""


class RobloxErrorResponse(BaseModel):
    """Тело ошибки Roblox. Используется только первая ошибка."""

    errors: list[RobloxErrorRaw]


class ChallengeMetadata(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    challenge_id: str


def _parse_error_body(response: httpx.Response) -> RobloxErrorResponse | None:
    try:
        return RobloxErrorResponse.model_validate_json(response.content)
    except ValidationError:
        return None


def process_400(response: httpx.Response) -> RobloxException:
    """400 обычно значит Bad Request, но иногда Roblox вкладывает ошибку в тело."""
    error_response = _parse_error_body(response)
    if error_response is None or not error_response.errors:
        return BadRequest()

    error = error_response.errors[0]
    return UnknownRobloxErrorCode(error.code, error.message)


def process_401(response: httpx.Response) -> RobloxException:
    """401 означает недействительный .ROBLOSECURITY.

    Если в теле есть ошибка с ненулевым кодом, она возвращается как есть.
    """
    error_response = _parse_error_body(response)
    if error_response is not None and error_response.errors:
        error = error_response.errors[0]
        if error.code != XCSRF_ERROR_CODE:
            return UnknownRobloxErrorCode(error.code, error.message)
    return RoblosecurityExpired()


def _decode_challenge_id(response: httpx.Response) -> str | None:
    # rblx-challenge-id не настоящий id, он лежит в base64 JSON метаданных
    metadata_encoded = response.headers.get(CHALLENGE_METADATA_HEADER)
    if metadata_encoded is None:
        return None

    try:
        metadata_raw = base64.b64decode(metadata_encoded, validate=True)
        metadata = ChallengeMetadata.model_validate_json(metadata_raw)
    except (binascii.Error, ValidationError):
        return None
    return metadata.challenge_id


def process_403(response: httpx.Response) -> RobloxException:
    """Классифицировать 403.

    Returns:
        XcsrfTokenRejected, если сервер отклонил токен и выдал новый,
        иначе терминальную ошибку
    """
    new_token = response.headers.get(XCSRF_HEADER)

    def token_error() -> RobloxException:
        if new_token:
            return XcsrfTokenRejected(new_token)
        return XcsrfNotReturned()

    error_response = _parse_error_body(response)
    if error_response is None:
        return token_error()

    if not error_response.errors:
        if new_token:
            return XcsrfTokenRejected(new_token)
        return UnknownStatus403Format()

    error = error_response.errors[0]
    if error.code == XCSRF_ERROR_CODE:
        # Roblox иногда отдаёт код 0 без сообщения, это тоже ошибка токена
        return token_error()
    if error.code == USER_DOES_NOT_OWN_ASSET_ERROR_CODE:
        return UserDoesNotOwnAsset()
    if error.message != CHALLENGE_REQUIRED_MESSAGE:
        return UnknownRobloxErrorCode(error.code, error.message)

    challenge_id = _decode_challenge_id(response)
    if challenge_id is None:
        return UnknownStatus403Format()
    return ChallengeRequired(challenge_id)


STANDARD_STATUS_ERRORS: StatusTable = {
    400: process_400,
    401: process_401,
    429: lambda response: TooManyRequests(),
    500: lambda response: InternalServerError(),
}

# Для эндпоинтов, отвечающих 404 на несуществующий id
NOT_FOUND_STATUS_ERRORS: StatusTable = {
    404: lambda response: NotFound(),
}


def map_error_status(
    response: httpx.Response, status_errors: StatusTable | None = None
) -> RobloxException:
    """Преобразовать неуспешный ответ в исключение по таблице статусов.

    Args:
        response: Ответ с не-2xx статусом
        status_errors: Дополнительные коды эндпоинта поверх STANDARD_STATUS_ERRORS

    Returns:
        Исключение для выбрасывания
    """
    table = {**STANDARD_STATUS_ERRORS, **(status_errors or {})}
    if response.status_code == 403:
        return process_403(response)

    factory = table.get(response.status_code)
    if factory is None:
        return UnknownStatusCode(response.status_code)
    return factory(response)


def parse_model(model: type[T] | Any) -> ResponseParser[T]:
    """Собрать парсер ответа для pydantic-модели или типа.

    Args:
        model: Модель или тип (например list[SomeModel])

    Returns:
        Функция, разбирающая тело ответа
    """
    adapter: TypeAdapter[T] = TypeAdapter(model)

    def parser(response: httpx.Response) -> T:
        return adapter.validate_json(response.content)

    return parser


def parse_json(response: httpx.Response) -> Any:
    return json.loads(response.content)


def parse_bytes(response: httpx.Response) -> bytes:
    return response.content


def ignore_body(response: httpx.Response) -> None:
    return None


def run_parser(parser: ResponseParser[T], response: httpx.Response) -> T:
    """Применить парсер, сводя любые ошибки разбора к MalformedResponse."""
    try:
        return parser(response)
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        # ValidationError и JSONDecodeError тоже ValueError
        logger.debug(
            "Не удалось разобрать ответ (статус %d): %s", response.status_code, exc
        )
        raise MalformedResponse(original_error=exc) from exc
