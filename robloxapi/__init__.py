"""Модуль для работы с Roblox API.

Предоставляет клиента с автоматическим обновлением x-csrf-token
и одним повтором запроса, если сервер отклонил токен.

Пример использования:
    from robloxapi import get_roblox_config, RobloxApiClientManager

    config = get_roblox_config()
    manager = await RobloxApiClientManager.from_config(config)

    # Economy API
    robux = await manager.robux()

    # Trades API
    trades, next_cursor = await manager.trades(TradeType.INBOUND)
"""

from robloxapi.api_client_manager import (
    ApiCredentials,
    RobloxApiClientManager,
)
from robloxapi.config_reader import (
    RobloxConfig,
    get_config,
    get_roblox_config,
    parse_config_file,
)
from robloxapi.exceptions import (
    AuthenticationRequired,
    BadRequest,
    ChallengeRequired,
    InternalServerError,
    InvalidAuth,
    InvalidPath,
    MalformedResponse,
    NetworkError,
    NotFound,
    PurchaseNonTradableLimitedError,
    PurchaseNonTradableLimitedReason,
    PurchaseTradableLimitedError,
    RoblosecurityExpired,
    RobloxAuthException,
    RobloxException,
    TooManyRequests,
    UnknownRobloxErrorCode,
    UnknownStatus403Format,
    UnknownStatusCode,
    UserDoesNotOwnAsset,
    XcsrfNotReturned,
)
from robloxapi.models import (
    AvatarSearchQuery,
    CatalogQueryLimit,
    Category,
    ClassicClothingType,
    CreatorType,
    Item,
    ItemType,
    Limit,
    MessageTab,
    NewAnimation,
    PresenceType,
    QueryGenre,
    SalesTypeFilter,
    SortAggregation,
    SortType,
    Subcategory,
    ThumbnailSize,
    TradeStatus,
    TradeType,
    User,
)
from robloxapi.request_executor import RequestDescriptor, RequestExecutor
from robloxapi.token_manager import XcsrfTokenManager

__all__ = [
    # API Client Manager
    "ApiCredentials",
    "RobloxApiClientManager",
    # Request Execution
    "RequestDescriptor",
    "RequestExecutor",
    # Configuration
    "RobloxConfig",
    "get_config",
    "get_roblox_config",
    "parse_config_file",
    # Exceptions
    "AuthenticationRequired",
    "BadRequest",
    "ChallengeRequired",
    "InternalServerError",
    "InvalidAuth",
    "InvalidPath",
    "MalformedResponse",
    "NetworkError",
    "NotFound",
    "PurchaseNonTradableLimitedError",
    "PurchaseNonTradableLimitedReason",
    "PurchaseTradableLimitedError",
    "RoblosecurityExpired",
    "RobloxAuthException",
    "RobloxException",
    "TooManyRequests",
    "UnknownRobloxErrorCode",
    "UnknownStatus403Format",
    "UnknownStatusCode",
    "UserDoesNotOwnAsset",
    "XcsrfNotReturned",
    # Shared Types
    "AvatarSearchQuery",
    "CatalogQueryLimit",
    "Category",
    "ClassicClothingType",
    "CreatorType",
    "Item",
    "ItemType",
    "Limit",
    "MessageTab",
    "NewAnimation",
    "PresenceType",
    "QueryGenre",
    "SalesTypeFilter",
    "SortAggregation",
    "SortType",
    "Subcategory",
    "ThumbnailSize",
    "TradeStatus",
    "TradeType",
    "User",
    # Token Management
    "XcsrfTokenManager",
]
