"""Выполнение запросов к Roblox API с обновлением x-csrf-token.

Если сервер отклоняет токен (403 + новый x-csrf-token), токен
заменяется и запрос повторяется ровно один раз.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx

from robloxapi.exceptions import InvalidAuth, NetworkError, XcsrfTokenRejected
from robloxapi.response_processing import (
    ResponseParser,
    StatusTable,
    map_error_status,
    run_parser,
)
from robloxapi.token_manager import XCSRF_HEADER, XcsrfTokenManager

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

T = TypeVar("T")

# Первая попытка и один повтор после обновления токена
MAX_ATTEMPTS = 2


@dataclass(frozen=True)
class RequestDescriptor:
    """Описание запроса, из которого собирается каждая попытка.

    Attributes:
        method: HTTP метод
        url: Полный URL эндпоинта
        headers: Заголовки (cookie, content-type и т.п.)
        params: Query-параметры
        json: Тело запроса в JSON
        content: Сырое тело запроса
        data: Поля формы (multipart вместе с files)
        files: Файлы multipart
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] | None = None
    json: Any = None
    content: bytes | None = None
    data: Mapping[str, Any] | None = None
    files: Mapping[str, Any] | None = None

    def build(
        self, client: httpx.AsyncClient, token: str | None = None
    ) -> httpx.Request:
        """Собрать новый httpx.Request.

        Args:
            client: Клиент, с настройками которого собирается запрос
            token: x-csrf-token; None — заголовок не добавляется

        Returns:
            Новый запрос для отправки
        """
        headers = dict(self.headers)
        if token is not None:
            headers[XCSRF_HEADER] = token
        return client.build_request(
            self.method,
            self.url,
            headers=headers,
            params=dict(self.params) if self.params is not None else None,
            json=self.json,
            content=self.content,
            data=dict(self.data) if self.data is not None else None,
            files=dict(self.files) if self.files is not None else None,
        )


class RequestExecutor:
    """Отправляет запросы, обновляя x-csrf-token и сводя ошибки к исключениям."""

    def __init__(
        self, http_client: httpx.AsyncClient, token_manager: XcsrfTokenManager
    ) -> None:
        self._http_client = http_client
        self._token_manager = token_manager

    async def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            return await self._http_client.send(request)
        except httpx.HTTPError as exc:
            logger.debug("Ошибка сети для %s %s: %s", request.method, request.url, exc)
            raise NetworkError(f"Ошибка сети: {exc}", original_error=exc) from exc

    async def execute(
        self,
        descriptor: RequestDescriptor,
        requires_token: bool,
        parser: ResponseParser[T],
        status_errors: StatusTable | None = None,
    ) -> T:
        """Выполнить запрос не более чем в две попытки.

        Args:
            descriptor: Описание запроса
            requires_token: Нужно ли прикладывать x-csrf-token
            parser: Разбор успешного ответа
            status_errors: Таблица ошибок эндпоинта по кодам статуса

        Returns:
            Результат парсера

        Raises:
            InvalidAuth: Токен отклонён и после повтора
            NetworkError: Ошибка транспорта
            MalformedResponse: Не удалось разобрать успешный ответ
            RobloxException: Прочие ошибки по таблице статусов
        """
        for attempt in range(1, MAX_ATTEMPTS + 1):
            token = self._token_manager.token if requires_token else None
            response = await self._send(descriptor.build(self._http_client, token))

            if response.is_success:
                await self._token_manager.update_token(
                    response.headers.get(XCSRF_HEADER, "")
                )
                return run_parser(parser, response)

            error = map_error_status(response, status_errors)
            if not isinstance(error, XcsrfTokenRejected):
                await self._token_manager.update_token(
                    response.headers.get(XCSRF_HEADER, "")
                )
                raise error

            await self._token_manager.update_token(error.token)
            if not requires_token:
                raise InvalidAuth(
                    f"{descriptor.method} {descriptor.url} требует x-csrf-token"
                )
            if attempt == MAX_ATTEMPTS:
                raise InvalidAuth(
                    "x-csrf-token отклонён после обновления", original_error=error
                )
            logger.debug(
                "x-csrf-token отклонён для %s %s, повторяем (попытка %d)",
                descriptor.method,
                descriptor.url,
                attempt + 1,
            )

        # Цикл всегда завершается return или raise
        raise AssertionError("unreachable")

    async def refresh_token(self, descriptor: RequestDescriptor) -> None:
        """Одна попытка, цель которой только получить свежий x-csrf-token.

        Args:
            descriptor: Запрос, на который сервер отвечает новым токеном

        Raises:
            NetworkError: Ошибка транспорта
            RobloxException: Неуспешный ответ без нового токена
        """
        request = descriptor.build(self._http_client, self._token_manager.token)
        response = await self._send(request)

        if await self._token_manager.update_token(
            response.headers.get(XCSRF_HEADER, "")
        ):
            return
        if response.is_success:
            return

        error = map_error_status(response)
        if isinstance(error, XcsrfTokenRejected):
            # Сервер вернул тот же токен, что уже сохранён
            return
        raise error
