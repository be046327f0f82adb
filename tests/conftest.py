"""Общие фикстуры для тестов robloxapi.

Содержит фикстуры, используемые в различных тестовых модулях.
"""

from __future__ import annotations

import inspect
import os
from collections.abc import AsyncGenerator, Awaitable, Callable

import httpx
import pytest

from robloxapi import (
    ApiCredentials,
    RobloxApiClientManager,
    get_roblox_config,
)

ROBLOSECURITY = "test-roblosecurity"

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


# ========== Unit фикстуры ==========


@pytest.fixture
def sent_requests() -> list[httpx.Request]:
    """Все запросы, ушедшие через мок-транспорт."""
    return []


@pytest.fixture
async def make_http_client(
    sent_requests: list[httpx.Request],
) -> AsyncGenerator[Callable[[Handler], httpx.AsyncClient], None]:
    """Фабрика httpx.AsyncClient поверх MockTransport.

    Обработчик может быть синхронным или асинхронным. Каждый запрос
    записывается в sent_requests.
    """
    clients: list[httpx.AsyncClient] = []

    def factory(handler: Handler) -> httpx.AsyncClient:
        async def record(request: httpx.Request) -> httpx.Response:
            sent_requests.append(request)
            response = handler(request)
            if inspect.isawaitable(response):
                response = await response
            return response

        client = httpx.AsyncClient(transport=httpx.MockTransport(record))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()


@pytest.fixture
def make_manager(
    make_http_client: Callable[[Handler], httpx.AsyncClient],
) -> Callable[..., RobloxApiClientManager]:
    """Фабрика независимых менеджеров (без multitone реестра)."""

    def factory(
        handler: Handler, roblosecurity: str | None = ROBLOSECURITY
    ) -> RobloxApiClientManager:
        return RobloxApiClientManager(
            credentials=ApiCredentials(roblosecurity=roblosecurity),
            http_client=make_http_client(handler),
        )

    return factory


# ========== Интеграционные фикстуры ==========


@pytest.fixture
async def manager() -> AsyncGenerator[RobloxApiClientManager, None]:
    """Создать менеджер из реальной конфигурации."""
    if os.getenv("ROBLOX_CONFIG") is None:
        pytest.skip("ROBLOX_CONFIG не задан")

    config = get_roblox_config()
    mgr = await RobloxApiClientManager.from_config(config)
    yield mgr
    # Cleanup после каждого теста
    await RobloxApiClientManager.close_all()
