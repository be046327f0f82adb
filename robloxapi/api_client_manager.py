"""Фасад Roblox API с обновлением x-csrf-token.

Реализует Multitone паттерн — один экземпляр на уникальный .ROBLOSECURITY
(ключ — отпечаток cookie, сам cookie в ключах и логах не появляется).
"""

import asyncio
import json
import logging
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import httpx

from robloxapi.config_reader import RobloxConfig
from robloxapi.exceptions import (
    AuthenticationRequired,
    InvalidPath,
    MalformedResponse,
    PurchaseNonTradableLimitedError,
    PurchaseNonTradableLimitedReason,
    PurchaseTradableLimitedError,
    RobloxException,
)
from robloxapi.models import (
    AssetInfo,
    AssetOperation,
    AvatarSearchQuery,
    AvatarSearchResponse,
    ClassicClothingType,
    ClientUserInformation,
    CountResponse,
    CurrencyResponse,
    FriendRequest,
    FriendRequestsResponse,
    FriendsListResponse,
    FriendUserInformation,
    GameInformation,
    GamesResponse,
    Item,
    ItemDetails,
    ItemDetailsResponse,
    ItemType,
    Limit,
    Listing,
    Message,
    MessagesPageMetadata,
    MessagesResponse,
    MessageTab,
    NewAnimation,
    NonTradableLimitedDetails,
    PurchaseNonTradableLimitedResponse,
    PurchaseTradableLimitedResponse,
    Reseller,
    ResellersResponse,
    Role,
    RoleMembersResponse,
    RolesResponse,
    SendTradeResponse,
    ThumbnailResponse,
    ThumbnailSize,
    Trade,
    TradeDetails,
    TradeDetailsResponse,
    TradeItem,
    TradesResponse,
    TradeType,
    TradeUserRaw,
    User,
    UserAssetRaw,
    UserDetails,
    UsernameUserDetails,
    UsernameUserDetailsResponse,
    UserPresence,
    UserPresenceResponse,
    UserSale,
    UserSalesResponse,
    UserSearchResponse,
    UserSearchResult,
)
from robloxapi.request_executor import RequestDescriptor, RequestExecutor
from robloxapi.response_processing import (
    NOT_FOUND_STATUS_ERRORS,
    ResponseParser,
    StatusTable,
    ignore_body,
    parse_bytes,
    parse_model,
)
from robloxapi.token_manager import XcsrfTokenManager, fingerprint

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

T = TypeVar("T")
K = TypeVar("K")

ROBLOSECURITY_COOKIE = ".ROBLOSECURITY"
ANONYMOUS_KEY_ID = "anonymous"

AUTH_URL = "https://auth.roblox.com/"
USERS_URL = "https://users.roblox.com/v1"
ECONOMY_URL = "https://economy.roblox.com"
TRADES_URL = "https://trades.roblox.com/v1/trades"
PRESENCE_URL = "https://presence.roblox.com/v1/presence"
FRIENDS_URL = "https://friends.roblox.com/v1"
CHAT_URL = "https://chat.roblox.com/v2"
GROUPS_URL = "https://groups.roblox.com/v1/groups"
CATALOG_ITEM_DETAILS_URL = "https://catalog.roblox.com/v1/catalog/items/details"
CATALOG_SEARCH_URL = "https://catalog.roblox.com/v1/search/items"
GAMES_URL = "https://games.roblox.com/v2"
THUMBNAILS_BATCH_URL = "https://thumbnails.roblox.com/v1/batch"
PRIVATE_MESSAGES_URL = "https://privatemessages.roblox.com/v1/messages"
MARKETPLACE_ITEMS_URL = "https://apis.roblox.com/marketplace-items/v1/items/details"
MARKETPLACE_SALES_URL = "https://apis.roblox.com/marketplace-sales/v1/item"
ASSET_DELIVERY_URL = "https://assetdelivery.roblox.com/v1/asset/"
ASSETS_URL = "https://apis.roblox.com/assets/user-auth/v1/assets"
UPLOAD_ANIMATION_URL = "https://www.roblox.com/ide/publish/uploadnewanimation"

SORT_ORDER = "Desc"
FRIEND_REQUESTS_LIMIT = 10
PRIVATE_MESSAGES_PAGE_SIZE = 20
# Максимальные limit эндпоинтов games/v2
USER_GAMES_LIMIT = 50
GROUP_GAMES_LIMIT = 100
# ide/publish принимает только клиентский User-Agent
IDE_USER_AGENT = "Roblox/WinInet"
# expectedCurrency в запросах покупки, 1 означает Robux
ROBUX_CURRENCY = 1


@dataclass
class ApiCredentials:
    """Учетные данные для Roblox.

    Attributes:
        roblosecurity: Значение cookie .ROBLOSECURITY; None — анонимный клиент
    """

    roblosecurity: str | None = None

    @property
    def key_id(self) -> str:
        """Уникальный идентификатор для multitone паттерна."""
        if not self.roblosecurity:
            return ANONYMOUS_KEY_ID
        return fingerprint(self.roblosecurity)


def _sort_by_argument_order(
    values: Iterable[T], order: Sequence[K], key: Callable[[T], K]
) -> list[T]:
    # Roblox не гарантирует порядок в батч-ответах
    positions = {value: index for index, value in enumerate(order)}
    return sorted(values, key=lambda value: positions.get(key(value), len(positions)))


def _user_from_raw(raw: TradeUserRaw) -> User:
    return User(user_id=raw.id, username=raw.name, display_name=raw.display_name)


def _trade_items_from_raw(assets: list[UserAssetRaw]) -> list[TradeItem]:
    return [
        TradeItem(
            item_id=asset.asset_id,
            serial_number=asset.serial_number,
            uaid=asset.id,
            name=asset.name,
            rap=asset.recent_average_price,
        )
        for asset in assets
    ]


def _parse_resellers(response: httpx.Response) -> tuple[list[Listing], str | None]:
    raw = ResellersResponse.model_validate_json(response.content)
    listings = [
        Listing(
            uaid=listing.user_asset_id,
            price=listing.price,
            reseller=Reseller(user_id=listing.seller.id, name=listing.seller.name),
            serial_number=listing.serial_number,
        )
        for listing in raw.data
    ]
    return listings, raw.next_page_cursor


def _parse_user_sales(response: httpx.Response) -> tuple[list[UserSale], str | None]:
    raw = UserSalesResponse.model_validate_json(response.content)
    sales = [
        UserSale(
            sale_id=sale.id,
            is_pending=sale.is_pending,
            user_id=sale.agent.id,
            user_display_name=sale.agent.name,
            robux_received=sale.currency.amount,
            asset_id=sale.details.id,
            asset_name=sale.details.name,
        )
        for sale in raw.data
    ]
    return sales, raw.next_page_cursor


def _parse_trades(response: httpx.Response) -> tuple[list[Trade], str | None]:
    raw = TradesResponse.model_validate_json(response.content)
    trades = [
        Trade(
            trade_id=trade.id,
            partner=_user_from_raw(trade.user),
            is_active=trade.is_active,
            status=trade.status,
        )
        for trade in raw.data
    ]
    return trades, raw.next_page_cursor


def _parse_trade_details(response: httpx.Response) -> TradeDetails:
    raw = TradeDetailsResponse.model_validate_json(response.content)
    # Первое предложение всегда наше, второе партнёра
    your_offer, partner_offer = raw.offers[0], raw.offers[1]
    return TradeDetails(
        partner=_user_from_raw(partner_offer.user),
        your_items=_trade_items_from_raw(your_offer.user_assets),
        your_robux=your_offer.robux,
        partner_items=_trade_items_from_raw(partner_offer.user_assets),
        partner_robux=partner_offer.robux,
        created=raw.created,
        expiration=raw.expiration,
        is_active=raw.is_active,
        status=raw.status,
    )


def _parse_role_members(response: httpx.Response) -> tuple[list[User], str | None]:
    raw = RoleMembersResponse.model_validate_json(response.content)
    members = [
        User(
            user_id=member.user_id,
            username=member.username,
            display_name=member.display_name,
        )
        for member in raw.data
    ]
    return members, raw.next_page_cursor


def _parse_messages(
    response: httpx.Response,
) -> tuple[list[Message], MessagesPageMetadata]:
    raw = MessagesResponse.model_validate_json(response.content)
    metadata = MessagesPageMetadata(
        total_message_count=raw.total_collection_size,
        page_number=raw.page_number,
        total_pages=raw.total_pages,
    )
    return raw.collection, metadata


class RobloxApiClientManager:
    """Multitone-фасад для работы с Roblox API.

    Содержит: httpx.AsyncClient, XcsrfTokenManager, RequestExecutor.
    Предоставляет типизированные методы для работы с API.

    Использование:
        manager = await RobloxApiClientManager.get_instance(credentials)
        robux = await manager.robux()
    """

    _instances: dict[str, "RobloxApiClientManager"] = {}
    _lock: asyncio.Lock | None = None

    def __init__(
        self,
        credentials: ApiCredentials,
        http_client: httpx.AsyncClient | None = None,
        config: RobloxConfig | None = None,
    ) -> None:
        """Инициализация менеджера.

        Для общего экземпляра используйте get_instance(). Прямое создание
        даёт независимый клиент со своим токеном.

        Args:
            credentials: Учетные данные
            http_client: Внешний httpx.AsyncClient; закрывает его вызывающий
            config: Таймаут, прокси и User-Agent для собственного клиента
        """
        self._credentials = credentials
        self._owns_http_client = http_client is None
        self._http_client = http_client or self._build_http_client(config)

        self._token_manager = XcsrfTokenManager(key_id=credentials.key_id)
        self._executor = RequestExecutor(
            http_client=self._http_client, token_manager=self._token_manager
        )

        # Кэш данных авторизованного пользователя
        self._user_information: ClientUserInformation | None = None
        self._user_lock = asyncio.Lock()

        logger.debug(
            "Создан экземпляр RobloxApiClientManager для key_id=%s",
            credentials.key_id,
        )

    @staticmethod
    def _build_http_client(config: RobloxConfig | None) -> httpx.AsyncClient:
        config = config or RobloxConfig()
        headers = {}
        if config.user_agent:
            headers["User-Agent"] = config.user_agent
        # assetdelivery отвечает редиректом на CDN
        return httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout),
            proxy=config.proxy,
            headers=headers,
            follow_redirects=True,
        )

    @classmethod
    async def get_instance(
        cls,
        credentials: ApiCredentials,
        http_client: httpx.AsyncClient | None = None,
        config: RobloxConfig | None = None,
    ) -> "RobloxApiClientManager":
        """Получить или создать экземпляр менеджера для key_id.

        http_client и config учитываются только при создании экземпляра.

        Args:
            credentials: Учетные данные API
            http_client: Внешний httpx.AsyncClient
            config: Настройки собственного HTTP клиента

        Returns:
            Экземпляр RobloxApiClientManager
        """
        if cls._lock is None:
            cls._lock = asyncio.Lock()

        async with cls._lock:
            key = credentials.key_id
            if key not in cls._instances:
                cls._instances[key] = cls(
                    credentials=credentials, http_client=http_client, config=config
                )
            return cls._instances[key]

    @classmethod
    async def from_config(cls, config: RobloxConfig) -> "RobloxApiClientManager":
        """Создать экземпляр из конфигурации Roblox.

        Args:
            config: Конфигурация Roblox из YAML-файла

        Returns:
            Экземпляр RobloxApiClientManager
        """
        roblosecurity = (
            config.roblosecurity.get_secret_value() if config.roblosecurity else None
        )
        credentials = ApiCredentials(roblosecurity=roblosecurity)
        return await cls.get_instance(credentials=credentials, config=config)

    @classmethod
    async def close_all(cls) -> None:
        """Закрыть все соединения и сбросить экземпляры."""
        instance_count = len(cls._instances)

        for manager in list(cls._instances.values()):
            await manager.aclose()

        cls._instances.clear()
        cls._lock = None
        logger.debug("Закрыты все соединения (%d экземпляров)", instance_count)

    async def aclose(self) -> None:
        """Закрыть собственный HTTP клиент и убрать экземпляр из реестра."""
        if self._owns_http_client:
            await self._http_client.aclose()

        key = self._credentials.key_id
        if self._instances.get(key) is self:
            del self._instances[key]

    @property
    def has_roblosecurity(self) -> bool:
        """Задан ли .ROBLOSECURITY."""
        return bool(self._credentials.roblosecurity)

    @property
    def xcsrf(self) -> str:
        """Текущий x-csrf-token (пустая строка, если ещё не получен)."""
        return self._token_manager.token

    async def set_xcsrf(self, token: str) -> None:
        """Вручную задать x-csrf-token."""
        await self._token_manager.update_token(token)

    def _auth_headers(self) -> dict[str, str]:
        """Заголовки с cookie; без .ROBLOSECURITY запрос не собирается.

        Raises:
            AuthenticationRequired: Если .ROBLOSECURITY не задан
        """
        if not self.has_roblosecurity:
            raise AuthenticationRequired()
        return {"Cookie": f"{ROBLOSECURITY_COOKIE}={self._credentials.roblosecurity}"}

    def _optional_auth_headers(self) -> dict[str, str]:
        if not self.has_roblosecurity:
            return {}
        return self._auth_headers()

    async def _execute(
        self,
        descriptor: RequestDescriptor,
        parser: ResponseParser[T],
        requires_token: bool = False,
        status_errors: StatusTable | None = None,
    ) -> T:
        """Выполнить запрос через RequestExecutor.

        Args:
            descriptor: Описание запроса
            parser: Разбор успешного ответа
            requires_token: Нужен ли x-csrf-token
            status_errors: Таблица ошибок эндпоинта

        Returns:
            Результат парсера

        Raises:
            RobloxException: Любая ошибка запроса (логируется и пробрасывается)
        """
        try:
            return await self._executor.execute(
                descriptor,
                requires_token=requires_token,
                parser=parser,
                status_errors=status_errors,
            )
        except RobloxException as exc:
            logger.error(
                "Ошибка API %s %s: %s", descriptor.method, descriptor.url, exc
            )
            raise

    # ========== Auth ==========

    async def force_refresh_xcsrf(self) -> None:
        """Принудительно получить свежий x-csrf-token.

        POST на auth.roblox.com всегда отвечает 403 с новым токеном.
        Выполняется одна попытка.

        Raises:
            NetworkError: Ошибка транспорта
            RobloxException: Сервер не выдал токен и вернул ошибку
        """
        descriptor = RequestDescriptor(
            method="POST", url=AUTH_URL, headers=self._optional_auth_headers()
        )
        try:
            await self._executor.refresh_token(descriptor)
        except RobloxException as exc:
            logger.error("Не удалось обновить x-csrf-token: %s", exc)
            raise

    # ========== Users ==========

    async def _client_user_information(self) -> ClientUserInformation:
        async with self._user_lock:
            if self._user_information is None:
                descriptor = RequestDescriptor(
                    method="GET",
                    url=f"{USERS_URL}/users/authenticated",
                    headers=self._auth_headers(),
                )
                self._user_information = await self._execute(
                    descriptor, parse_model(ClientUserInformation)
                )
            return self._user_information

    async def user_id(self) -> int:
        """Получить id авторизованного пользователя (кэшируется).

        Returns:
            id пользователя

        Raises:
            AuthenticationRequired: Если .ROBLOSECURITY не задан
        """
        return (await self._client_user_information()).user_id

    async def username(self) -> str:
        """Получить имя авторизованного пользователя (кэшируется)."""
        return (await self._client_user_information()).username

    async def display_name(self) -> str:
        """Получить отображаемое имя авторизованного пользователя (кэшируется)."""
        return (await self._client_user_information()).display_name

    async def user_search(
        self,
        keyword: str,
        limit: Limit = Limit.TEN,
        cursor: str | None = None,
    ) -> tuple[list[UserSearchResult], str | None]:
        """Поиск пользователей по ключевому слову.

        Args:
            keyword: Строка поиска
            limit: Размер страницы
            cursor: Курсор следующей страницы

        Returns:
            Найденные пользователи и курсор следующей страницы
        """
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{USERS_URL}/users/search",
            headers=self._optional_auth_headers(),
            params={"keyword": keyword, "limit": int(limit), "cursor": cursor or ""},
        )
        raw = await self._execute(descriptor, parse_model(UserSearchResponse))
        return raw.data, raw.next_page_cursor

    async def user_details(self, user_id: int) -> UserDetails:
        """Получить данные пользователя по id.

        Raises:
            NotFound: Если пользователя с таким id нет
        """
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{USERS_URL}/users/{user_id}",
            headers=self._optional_auth_headers(),
        )
        return await self._execute(
            descriptor, parse_model(UserDetails), status_errors=NOT_FOUND_STATUS_ERRORS
        )

    async def username_user_details(
        self, usernames: list[str], exclude_banned_users: bool = False
    ) -> list[UsernameUserDetails]:
        """Получить данные пользователей по именам.

        Args:
            usernames: Имена пользователей
            exclude_banned_users: Исключить заблокированных

        Returns:
            Данные найденных пользователей
        """
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{USERS_URL}/usernames/users",
            headers=self._optional_auth_headers(),
            json={"usernames": usernames, "excludeBannedUsers": exclude_banned_users},
        )
        raw = await self._execute(
            descriptor, parse_model(UsernameUserDetailsResponse), requires_token=True
        )
        return raw.data

    # ========== Economy ==========

    async def robux(self) -> int:
        """Получить баланс Robux авторизованного пользователя.

        Raises:
            AuthenticationRequired: Если .ROBLOSECURITY не задан
        """
        headers = self._auth_headers()
        user_id = await self.user_id()
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{ECONOMY_URL}/v1/users/{user_id}/currency",
            headers=headers,
        )
        raw = await self._execute(descriptor, parse_model(CurrencyResponse))
        return raw.robux

    async def resellers(
        self,
        item_id: int,
        limit: Limit = Limit.TEN,
        cursor: str | None = None,
    ) -> tuple[list[Listing], str | None]:
        """Получить лоты перепродажи limited предмета.

        Args:
            item_id: id предмета
            limit: Размер страницы
            cursor: Курсор следующей страницы

        Returns:
            Лоты (от дешёвых к дорогим) и курсор следующей страницы
        """
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{ECONOMY_URL}/v1/assets/{item_id}/resellers",
            headers=self._auth_headers(),
            params={"cursor": cursor or "", "limit": int(limit)},
        )
        return await self._execute(descriptor, _parse_resellers)

    async def user_sales(
        self,
        limit: Limit = Limit.HUNDRED,
        cursor: str | None = None,
    ) -> tuple[list[UserSale], str | None]:
        """Получить историю продаж авторизованного пользователя.

        Args:
            limit: Размер страницы
            cursor: Курсор следующей страницы

        Returns:
            Продажи и курсор следующей страницы
        """
        headers = self._auth_headers()
        user_id = await self.user_id()
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{ECONOMY_URL}/v2/users/{user_id}/transactions",
            headers=headers,
            params={
                "cursor": cursor or "",
                "limit": int(limit),
                "transactionType": "Sale",
            },
        )
        return await self._execute(descriptor, _parse_user_sales)

    async def put_limited_on_sale(self, item_id: int, uaid: int, price: int) -> None:
        """Выставить limited предмет на продажу.

        Args:
            item_id: id предмета
            uaid: id экземпляра предмета
            price: Цена в Robux

        Raises:
            UserDoesNotOwnAsset: Если экземпляр не принадлежит пользователю
        """
        descriptor = RequestDescriptor(
            method="PATCH",
            url=f"{ECONOMY_URL}/v1/assets/{item_id}/resellable-copies/{uaid}",
            headers=self._auth_headers(),
            json={"price": price},
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    async def take_limited_off_sale(self, item_id: int, uaid: int) -> None:
        """Снять limited предмет с продажи."""
        descriptor = RequestDescriptor(
            method="PATCH",
            url=f"{ECONOMY_URL}/v1/assets/{item_id}/resellable-copies/{uaid}",
            headers=self._auth_headers(),
            json={},
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    async def purchase_tradable_limited(
        self, product_id: int, seller_id: int, uaid: int, price: int
    ) -> None:
        """Купить tradable limited предмет у продавца.

        Args:
            product_id: product id предмета (см. product_id())
            seller_id: id продавца
            uaid: id экземпляра предмета
            price: Ожидаемая цена

        Raises:
            PurchaseTradableLimitedError: Если Roblox отклонил покупку
        """
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{ECONOMY_URL}/v1/purchases/products/{product_id}",
            headers=self._auth_headers(),
            json={
                "expectedCurrency": ROBUX_CURRENCY,
                "expectedPrice": price,
                "expectedSellerId": seller_id,
                "userAssetId": uaid,
            },
        )
        raw = await self._execute(
            descriptor, parse_model(PurchaseTradableLimitedResponse), requires_token=True
        )
        if not raw.purchased:
            logger.error(
                "Покупка product_id=%d не выполнена: %s", product_id, raw.reason
            )
            raise PurchaseTradableLimitedError(raw.reason, raw.error_msg)

    # ========== Trades ==========

    async def trades(
        self,
        trade_type: TradeType,
        limit: Limit = Limit.TEN,
        cursor: str | None = None,
    ) -> tuple[list[Trade], str | None]:
        """Получить список сделок.

        Args:
            trade_type: Входящие, исходящие, завершённые или неактивные
            limit: Размер страницы
            cursor: Курсор следующей страницы

        Returns:
            Сделки (новые первыми) и курсор следующей страницы
        """
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{TRADES_URL}/{trade_type.value.lower()}",
            headers=self._auth_headers(),
            params={"sortOrder": SORT_ORDER, "cursor": cursor or "", "limit": int(limit)},
        )
        return await self._execute(descriptor, _parse_trades)

    async def trade_details(self, trade_id: int) -> TradeDetails:
        """Получить детали сделки."""
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{TRADES_URL}/{trade_id}",
            headers=self._auth_headers(),
        )
        return await self._execute(descriptor, _parse_trade_details)

    async def trade_count(self, trade_type: TradeType = TradeType.INBOUND) -> int:
        """Получить количество сделок указанного типа."""
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{TRADES_URL}/{trade_type.value.lower()}/count",
            headers=self._auth_headers(),
        )
        raw = await self._execute(descriptor, parse_model(CountResponse))
        return raw.count

    async def accept_trade(self, trade_id: int) -> None:
        """Принять сделку."""
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{TRADES_URL}/{trade_id}/accept",
            headers=self._auth_headers(),
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    async def decline_trade(self, trade_id: int) -> None:
        """Отклонить сделку."""
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{TRADES_URL}/{trade_id}/decline",
            headers=self._auth_headers(),
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    async def send_trade(
        self,
        partner_id: int,
        your_item_uaids: list[int],
        your_robux: int,
        partner_item_uaids: list[int],
        partner_robux: int,
    ) -> int:
        """Отправить предложение сделки.

        Args:
            partner_id: id партнёра
            your_item_uaids: Свои предметы (uaid)
            your_robux: Свои Robux
            partner_item_uaids: Предметы партнёра (uaid)
            partner_robux: Robux партнёра

        Returns:
            id созданной сделки
        """
        headers = self._auth_headers()
        user_id = await self.user_id()
        # Предложение партнёра всегда первое
        offers = [
            {
                "userId": partner_id,
                "userAssetIds": partner_item_uaids,
                "robux": partner_robux,
            },
            {"userId": user_id, "userAssetIds": your_item_uaids, "robux": your_robux},
        ]
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{TRADES_URL}/send",
            headers=headers,
            json={"offers": offers},
        )
        raw = await self._execute(
            descriptor, parse_model(SendTradeResponse), requires_token=True
        )
        return raw.id

    # ========== Presence ==========

    async def register_presence(self) -> None:
        """Отметить пользователя онлайн."""
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{PRESENCE_URL}/register-app-presence",
            headers=self._auth_headers(),
            json={"location": "Home"},
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    async def users_presence(self, user_ids: list[int]) -> list[UserPresence]:
        """Получить статус присутствия пользователей.

        Неизвестный тип присутствия разбирается как OFFLINE.

        Args:
            user_ids: id пользователей

        Returns:
            Статусы присутствия
        """
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{PRESENCE_URL}/users",
            headers=self._optional_auth_headers(),
            json={"userIds": user_ids},
        )
        raw = await self._execute(
            descriptor, parse_model(UserPresenceResponse), requires_token=True
        )
        return raw.user_presences

    # ========== Friends ==========

    async def friends_list(self, user_id: int) -> list[FriendUserInformation]:
        """Получить список друзей пользователя."""
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{FRIENDS_URL}/users/{user_id}/friends",
            headers=self._optional_auth_headers(),
        )
        raw = await self._execute(descriptor, parse_model(FriendsListResponse))
        return raw.data

    async def friend_requests(
        self, cursor: str | None = None
    ) -> tuple[list[FriendRequest], str | None]:
        """Получить входящие заявки в друзья.

        Args:
            cursor: Курсор следующей страницы

        Returns:
            Заявки и курсор следующей страницы
        """
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{FRIENDS_URL}/my/friends/requests",
            headers=self._auth_headers(),
            params={"limit": FRIEND_REQUESTS_LIMIT, "cursor": cursor or ""},
        )
        raw = await self._execute(descriptor, parse_model(FriendRequestsResponse))
        return raw.data, raw.next_page_cursor

    async def pending_friend_requests(self) -> int:
        """Получить количество входящих заявок в друзья."""
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{FRIENDS_URL}/user/friend-requests/count",
            headers=self._auth_headers(),
        )
        raw = await self._execute(descriptor, parse_model(CountResponse))
        return raw.count

    async def accept_friend_request(self, requester_id: int) -> None:
        """Принять заявку в друзья."""
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{FRIENDS_URL}/users/{requester_id}/accept-friend-request",
            headers=self._auth_headers(),
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    async def decline_friend_request(self, requester_id: int) -> None:
        """Отклонить заявку в друзья."""
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{FRIENDS_URL}/users/{requester_id}/decline-friend-request",
            headers=self._auth_headers(),
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    async def send_friend_request(self, target_id: int) -> None:
        """Отправить заявку в друзья."""
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{FRIENDS_URL}/users/{target_id}/request-friendship",
            headers=self._auth_headers(),
            json={"friendshipOriginSourceType": 0},
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    async def unfriend(self, target_id: int) -> None:
        """Удалить пользователя из друзей."""
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{FRIENDS_URL}/users/{target_id}/unfriend",
            headers=self._auth_headers(),
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    # ========== Chat ==========

    async def unread_conversation_count(self) -> int:
        """Получить количество непрочитанных диалогов."""
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{CHAT_URL}/get-unread-conversation-count",
            headers=self._auth_headers(),
        )
        raw = await self._execute(descriptor, parse_model(CountResponse))
        return raw.count

    # ========== Groups ==========

    async def group_roles(self, group_id: int) -> list[Role]:
        """Получить роли группы.

        Args:
            group_id: id группы

        Returns:
            Роли по возрастанию ранга
        """
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{GROUPS_URL}/{group_id}/roles",
            headers=self._optional_auth_headers(),
        )
        raw = await self._execute(descriptor, parse_model(RolesResponse))
        return sorted(raw.roles, key=lambda role: role.rank)

    async def group_role_members(
        self,
        group_id: int,
        role_id: int,
        limit: Limit = Limit.TEN,
        cursor: str | None = None,
    ) -> tuple[list[User], str | None]:
        """Получить участников группы с указанной ролью.

        Args:
            group_id: id группы
            role_id: id роли
            limit: Размер страницы
            cursor: Курсор следующей страницы

        Returns:
            Участники и курсор следующей страницы
        """
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{GROUPS_URL}/{group_id}/roles/{role_id}/users",
            headers=self._optional_auth_headers(),
            params={"cursor": cursor or "", "limit": int(limit), "sortOrder": SORT_ORDER},
        )
        return await self._execute(descriptor, _parse_role_members)

    async def set_group_member_role(
        self, user_id: int, group_id: int, role_id: int
    ) -> None:
        """Назначить участнику группы роль."""
        descriptor = RequestDescriptor(
            method="PATCH",
            url=f"{GROUPS_URL}/{group_id}/users/{user_id}",
            headers=self._auth_headers(),
            json={"roleId": role_id},
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    # ========== Catalog ==========

    async def item_details(self, items: list[Item]) -> list[ItemDetails]:
        """Получить детали предметов каталога.

        Args:
            items: Предметы (тип и id)

        Returns:
            Детали в порядке аргументов
        """
        descriptor = RequestDescriptor(
            method="POST",
            url=CATALOG_ITEM_DETAILS_URL,
            headers=self._optional_auth_headers(),
            json={"items": [item.model_dump(by_alias=True, mode="json") for item in items]},
        )
        raw = await self._execute(
            descriptor, parse_model(ItemDetailsResponse), requires_token=True
        )
        return _sort_by_argument_order(
            raw.data, [item.id for item in items], key=lambda details: details.id
        )

    async def product_id_bulk(self, item_ids: list[int]) -> list[int]:
        """Получить product id ассетов.

        Raises:
            MalformedResponse: Если у предмета нет product id
        """
        items = [Item(item_type=ItemType.ASSET, id=item_id) for item_id in item_ids]
        product_ids = []
        for details in await self.item_details(items):
            if details.product_id is None:
                raise MalformedResponse(f"У предмета {details.id} нет productId")
            product_ids.append(details.product_id)
        return product_ids

    async def product_id(self, item_id: int) -> int:
        """Получить product id ассета."""
        product_ids = await self.product_id_bulk([item_id])
        if not product_ids:
            raise MalformedResponse(f"Предмет {item_id} не найден в ответе")
        return product_ids[0]

    async def collectible_item_id_bulk(self, item_ids: list[int]) -> list[str]:
        """Получить collectible item id ассетов (только UGC limited).

        Raises:
            MalformedResponse: Если у предмета нет collectible item id
        """
        items = [Item(item_type=ItemType.ASSET, id=item_id) for item_id in item_ids]
        collectible_item_ids = []
        for details in await self.item_details(items):
            if details.collectible_item_id is None:
                raise MalformedResponse(f"У предмета {details.id} нет collectibleItemId")
            collectible_item_ids.append(details.collectible_item_id)
        return collectible_item_ids

    async def collectible_item_id(self, item_id: int) -> str:
        """Получить collectible item id ассета."""
        collectible_item_ids = await self.collectible_item_id_bulk([item_id])
        if not collectible_item_ids:
            raise MalformedResponse(f"Предмет {item_id} не найден в ответе")
        return collectible_item_ids[0]

    async def avatar_catalog_search(
        self, query: AvatarSearchQuery, cursor: str | None = None
    ) -> tuple[list[Item], str | None]:
        """Поиск по каталогу аватаров.

        Args:
            query: Параметры поиска
            cursor: Курсор следующей страницы

        Returns:
            Найденные предметы и курсор следующей страницы
        """
        params = query.to_params()
        params["cursor"] = cursor or ""
        descriptor = RequestDescriptor(
            method="GET",
            url=CATALOG_SEARCH_URL,
            headers=self._optional_auth_headers(),
            params=params,
        )
        raw = await self._execute(descriptor, parse_model(AvatarSearchResponse))
        return raw.data, raw.next_page_cursor

    # ========== Games ==========

    async def _games(
        self, url: str, limit: int, cursor: str | None
    ) -> tuple[list[GameInformation], str | None]:
        descriptor = RequestDescriptor(
            method="GET",
            url=url,
            headers=self._optional_auth_headers(),
            params={"limit": limit, "sortOrder": SORT_ORDER, "cursor": cursor or ""},
        )
        raw = await self._execute(descriptor, parse_model(GamesResponse))
        return raw.data, raw.next_page_cursor

    async def user_games(
        self, user_id: int, cursor: str | None = None
    ) -> tuple[list[GameInformation], str | None]:
        """Получить игры пользователя, новые первыми (по 50 на страницу).

        Args:
            user_id: id пользователя
            cursor: Курсор следующей страницы

        Returns:
            Игры и курсор следующей страницы
        """
        return await self._games(
            f"{GAMES_URL}/users/{user_id}/games", USER_GAMES_LIMIT, cursor
        )

    async def group_games(
        self, group_id: int, cursor: str | None = None
    ) -> tuple[list[GameInformation], str | None]:
        """Получить игры группы, новые первыми (по 100 на страницу)."""
        return await self._games(
            f"{GAMES_URL}/groups/{group_id}/gamesv2", GROUP_GAMES_LIMIT, cursor
        )

    # ========== Thumbnails ==========

    async def _thumbnail_urls(
        self, target_ids: list[int], requests: list[dict[str, Any]]
    ) -> list[str]:
        descriptor = RequestDescriptor(
            method="POST", url=THUMBNAILS_BATCH_URL, json=requests
        )
        raw = await self._execute(descriptor, parse_model(ThumbnailResponse))
        data = _sort_by_argument_order(
            raw.data, target_ids, key=lambda thumbnail: thumbnail.target_id
        )
        return [thumbnail.image_url for thumbnail in data]

    async def asset_thumbnail_url_bulk(
        self, asset_ids: list[int], size: ThumbnailSize
    ) -> list[str]:
        """Получить ссылки на превью ассетов.

        Args:
            asset_ids: id ассетов
            size: Размер превью

        Returns:
            Ссылки в порядке аргументов
        """
        requests = [
            {
                "requestId": f"{asset_id}::Asset:{size.value}:png:regular",
                "type": "Asset",
                "targetId": asset_id,
                "token": "",
                "format": "png",
                "size": size.value,
            }
            for asset_id in asset_ids
        ]
        return await self._thumbnail_urls(asset_ids, requests)

    async def asset_thumbnail_url(self, asset_id: int, size: ThumbnailSize) -> str:
        """Получить ссылку на превью ассета."""
        urls = await self.asset_thumbnail_url_bulk([asset_id], size)
        if not urls:
            raise MalformedResponse(f"Нет превью для ассета {asset_id}")
        return urls[0]

    async def avatar_thumbnail_url_bulk(
        self, user_ids: list[int], size: ThumbnailSize
    ) -> list[str]:
        """Получить ссылки на превью аватаров.

        Args:
            user_ids: id пользователей
            size: Размер превью

        Returns:
            Ссылки в порядке аргументов
        """
        requests = [
            {
                "requestId": f"{user_id}:undefined:Avatar:{size.value}:null:regular",
                "type": "Avatar",
                "targetId": user_id,
                "format": None,
                "size": size.value,
            }
            for user_id in user_ids
        ]
        return await self._thumbnail_urls(user_ids, requests)

    async def avatar_thumbnail_url(self, user_id: int, size: ThumbnailSize) -> str:
        """Получить ссылку на превью аватара."""
        urls = await self.avatar_thumbnail_url_bulk([user_id], size)
        if not urls:
            raise MalformedResponse(f"Нет превью для аватара {user_id}")
        return urls[0]

    # ========== Private messages ==========

    async def messages(
        self, page: int = 0, tab: MessageTab = MessageTab.INBOX
    ) -> tuple[list[Message], MessagesPageMetadata]:
        """Получить страницу личных сообщений.

        Args:
            page: Номер страницы, с нуля
            tab: Вкладка (входящие, отправленные, архив)

        Returns:
            Сообщения и метаданные страницы
        """
        descriptor = RequestDescriptor(
            method="GET",
            url=PRIVATE_MESSAGES_URL,
            headers=self._auth_headers(),
            params={
                "messageTab": tab.value,
                "pageNumber": page,
                "pageSize": PRIVATE_MESSAGES_PAGE_SIZE,
            },
        )
        return await self._execute(descriptor, _parse_messages)

    # ========== Marketplace ==========

    async def non_tradable_limited_details(
        self, collectible_item_ids: list[str]
    ) -> list[NonTradableLimitedDetails]:
        """Получить детали non-tradable limited предметов.

        Args:
            collectible_item_ids: collectible item id предметов

        Returns:
            Детали в порядке аргументов
        """
        descriptor = RequestDescriptor(
            method="POST",
            url=MARKETPLACE_ITEMS_URL,
            headers=self._auth_headers(),
            json={"itemIds": collectible_item_ids},
        )
        raw = await self._execute(
            descriptor,
            parse_model(list[NonTradableLimitedDetails]),
            requires_token=True,
        )
        return _sort_by_argument_order(
            raw, collectible_item_ids, key=lambda details: details.collectible_item_id
        )

    async def _single_non_tradable_limited(
        self, collectible_item_id: str
    ) -> NonTradableLimitedDetails:
        details = await self.non_tradable_limited_details([collectible_item_id])
        if not details:
            raise MalformedResponse(f"Предмет {collectible_item_id} не найден в ответе")
        return details[0]

    async def collectible_product_id(self, collectible_item_id: str) -> str:
        """Получить collectible product id предмета."""
        details = await self._single_non_tradable_limited(collectible_item_id)
        return details.collectible_product_id

    async def collectible_product_id_bulk(
        self, collectible_item_ids: list[str]
    ) -> list[str]:
        """Получить collectible product id предметов в порядке аргументов.

        Raises:
            MalformedResponse: Если в ответе есть не все предметы
        """
        details = await self.non_tradable_limited_details(collectible_item_ids)
        if len(details) != len(collectible_item_ids):
            raise MalformedResponse(
                f"Ожидалось {len(collectible_item_ids)} предметов, получено {len(details)}"
            )
        return [item.collectible_product_id for item in details]

    async def collectible_creator_id(self, collectible_item_id: str) -> int:
        """Получить id создателя предмета."""
        details = await self._single_non_tradable_limited(collectible_item_id)
        return details.creator_id

    async def purchase_non_tradable_limited(
        self,
        collectible_item_id: str,
        collectible_product_id: str,
        seller_id: int,
        price: int,
    ) -> None:
        """Купить non-tradable limited предмет.

        Args:
            collectible_item_id: collectible item id предмета
            collectible_product_id: collectible product id предмета
            seller_id: id продавца (создателя)
            price: Ожидаемая цена

        Raises:
            PurchaseNonTradableLimitedError: Если Roblox отклонил покупку
            MalformedResponse: Если отказ пришёл без errorMessage
        """
        headers = self._auth_headers()
        user_id = await self.user_id()
        descriptor = RequestDescriptor(
            method="POST",
            url=f"{MARKETPLACE_SALES_URL}/{collectible_item_id}/purchase-item",
            headers=headers,
            json={
                "collectibleItemId": collectible_item_id,
                "expectedCurrency": ROBUX_CURRENCY,
                "expectedPrice": price,
                "expectedPurchaserId": user_id,
                "expectedPurchaserType": "User",
                "expectedSellerId": seller_id,
                "expectedSellerType": "User",
                "idempotencyKey": str(uuid.uuid4()),
                "collectibleProductId": collectible_product_id,
            },
        )
        raw = await self._execute(
            descriptor,
            parse_model(PurchaseNonTradableLimitedResponse),
            requires_token=True,
        )
        if raw.purchased:
            return

        if raw.error_message is None:
            raise MalformedResponse("Отказ в покупке без errorMessage")

        try:
            reason = PurchaseNonTradableLimitedReason(raw.error_message)
        except ValueError:
            reason = PurchaseNonTradableLimitedReason.UNKNOWN
        logger.error(
            "Покупка %s не выполнена: %s", collectible_item_id, raw.error_message
        )
        raise PurchaseNonTradableLimitedError(reason, raw.purchase_result)

    # ========== Assets ==========

    async def get_asset_info(self, asset_id: int) -> AssetInfo:
        """Получить сведения об ассете, доступном пользователю.

        Raises:
            NotFound: Если ассета с таким id нет
        """
        descriptor = RequestDescriptor(
            method="GET",
            url=f"{ASSETS_URL}/{asset_id}",
            headers=self._auth_headers(),
        )
        return await self._execute(
            descriptor,
            parse_model(AssetInfo),
            requires_token=True,
            status_errors=NOT_FOUND_STATUS_ERRORS,
        )

    async def upload_classic_clothing_to_group(
        self,
        group_id: int,
        name: str,
        description: str,
        image_path: str | Path,
        clothing_type: ClassicClothingType,
    ) -> AssetOperation:
        """Загрузить классическую одежду от имени группы.

        Загрузка рубашки или штанов стоит 10 Robux, футболки бесплатны.

        Args:
            group_id: id группы-владельца
            name: Название
            description: Описание
            image_path: Путь к изображению шаблона
            clothing_type: Тип одежды

        Returns:
            Операция загрузки

        Raises:
            InvalidPath: Если файл не удалось прочитать
        """
        headers = self._auth_headers()
        path = Path(image_path)
        if not path.name:
            raise InvalidPath(str(image_path))
        try:
            image = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise InvalidPath(str(image_path), original_error=exc) from exc

        upload_request = {
            "displayName": name,
            "description": description,
            "assetType": clothing_type.asset_type,
            "creationContext": {
                "creator": {"groupId": group_id},
                "expectedPrice": clothing_type.upload_price,
            },
        }
        descriptor = RequestDescriptor(
            method="POST",
            url=ASSETS_URL,
            headers=headers,
            data={"request": json.dumps(upload_request)},
            files={"fileContent": (path.name, image)},
        )
        operation = await self._execute(
            descriptor, parse_model(AssetOperation), requires_token=True
        )
        logger.info(
            "Загружена одежда %s для группы %d (operation_id=%s)",
            clothing_type.value,
            group_id,
            operation.operation_id,
        )
        return operation

    async def upload_new_animation(self, animation: NewAnimation) -> None:
        """Загрузить новую анимацию.

        Args:
            animation: Название, описание, группа и содержимое анимации
        """
        headers = self._auth_headers()
        headers["User-Agent"] = IDE_USER_AGENT
        params: dict[str, Any] = {
            "assetTypeName": "Animation",
            "name": animation.name,
            "description": animation.description,
            "AllID": 1,
            "ispublic": "False",
            "allowComments": "True",
            "isGamesAsset": "False",
        }
        if animation.group_id is not None:
            params["groupId"] = animation.group_id
        descriptor = RequestDescriptor(
            method="POST",
            url=UPLOAD_ANIMATION_URL,
            headers=headers,
            params=params,
            content=animation.animation_data,
        )
        await self._execute(descriptor, ignore_body, requires_token=True)

    # ========== Asset delivery ==========

    async def fetch_asset_data(self, asset_id: int) -> bytes:
        """Скачать содержимое ассета.

        Args:
            asset_id: id ассета

        Returns:
            Сырые байты ассета

        Raises:
            NotFound: Если ассета с таким id нет
        """
        descriptor = RequestDescriptor(
            method="GET",
            url=ASSET_DELIVERY_URL,
            headers=self._optional_auth_headers(),
            params={"ID": asset_id},
        )
        return await self._execute(
            descriptor, parse_bytes, status_errors=NOT_FOUND_STATUS_ERRORS
        )
