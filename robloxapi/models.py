"""Типы запросов и ответов Roblox API.

Поля ответов в camelCase, в моделях — snake_case (alias_generator).
Модели с суффиксом Raw описывают сырой ответ и наружу не отдаются.
"""

from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RobloxModel(BaseModel):
    """Базовая модель: camelCase в JSON, snake_case в Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Limit(IntEnum):
    """Допустимые значения limit для большинства эндпоинтов Roblox."""

    TEN = 10
    TWENTY_FIVE = 25
    FIFTY = 50
    HUNDRED = 100


class User(BaseModel):
    """Пользователь Roblox."""

    user_id: int
    username: str
    display_name: str


class PageResponse(RobloxModel):
    previous_page_cursor: str | None = None
    next_page_cursor: str | None = None


class CountResponse(RobloxModel):
    count: int


# ========== Users ==========


class ClientUserInformation(RobloxModel):
    """Ответ users/v1/users/authenticated."""

    user_id: int = Field(alias="id")
    username: str = Field(alias="name")
    display_name: str


class UserSearchResult(RobloxModel):
    user_id: int = Field(alias="id")
    username: str = Field(alias="name")
    display_name: str
    has_verified_badge: bool = False
    previous_usernames: list[str] = Field(default_factory=list)


class UserSearchResponse(PageResponse):
    data: list[UserSearchResult]


class UserDetails(RobloxModel):
    user_id: int = Field(alias="id")
    username: str = Field(alias="name")
    display_name: str
    description: str = ""
    created: str
    is_banned: bool = False
    has_verified_badge: bool = False


class UsernameUserDetails(RobloxModel):
    requested_username: str
    user_id: int = Field(alias="id")
    username: str = Field(alias="name")
    display_name: str
    has_verified_badge: bool = False


class UsernameUserDetailsResponse(RobloxModel):
    data: list[UsernameUserDetails]


# ========== Economy ==========


class CurrencyResponse(RobloxModel):
    robux: int


class Reseller(BaseModel):
    user_id: int
    name: str


class Listing(BaseModel):
    """Лот перепродажи limited предмета.

    Attributes:
        uaid: Уникальный id экземпляра предмета (userAssetId)
        price: Цена лота
        reseller: Продавец
        serial_number: Серийный номер, есть только у Limited U
    """

    uaid: int
    price: int
    reseller: Reseller
    serial_number: int | None = None


class ResellerRaw(RobloxModel):
    id: int
    name: str


class ListingRaw(RobloxModel):
    user_asset_id: int
    seller: ResellerRaw
    price: int
    serial_number: int | None = None


class ResellersResponse(PageResponse):
    data: list[ListingRaw]


class UserSale(BaseModel):
    """Продажа из истории транзакций пользователя.

    Attributes:
        sale_id: Идентификатор транзакции
        is_pending: Средства ещё не зачислены
        user_id: Покупатель
        user_display_name: Отображаемое имя покупателя
        robux_received: Сумма после комиссии
        asset_id: Проданный предмет
        asset_name: Название предмета
    """

    sale_id: int
    is_pending: bool
    user_id: int
    user_display_name: str
    robux_received: int
    asset_id: int
    asset_name: str


class SaleAgentRaw(RobloxModel):
    # Покупатель; в name лежит отображаемое имя
    id: int
    name: str


class SaleDetailsRaw(RobloxModel):
    id: int
    name: str


class SaleCurrencyRaw(RobloxModel):
    amount: int


class SaleRaw(RobloxModel):
    id: int
    is_pending: bool
    agent: SaleAgentRaw
    details: SaleDetailsRaw
    currency: SaleCurrencyRaw


class UserSalesResponse(PageResponse):
    data: list[SaleRaw]


class PurchaseTradableLimitedResponse(RobloxModel):
    purchased: bool
    reason: str = ""
    error_msg: str = ""


# ========== Trades ==========


class TradeType(str, Enum):
    INBOUND = "Inbound"
    OUTBOUND = "Outbound"
    COMPLETED = "Completed"
    INACTIVE = "Inactive"


class TradeStatus(str, Enum):
    OPEN = "Open"
    COMPLETED = "Completed"
    DECLINED = "Declined"
    EXPIRED = "Expired"
    REJECTED_DUE_TO_ERROR = "RejectedDueToError"


class Trade(BaseModel):
    trade_id: int
    partner: User
    is_active: bool
    status: TradeStatus


class TradeItem(BaseModel):
    """Предмет в сделке.

    Attributes:
        item_id: id ассета
        serial_number: Серийный номер (только Limited U)
        uaid: Уникальный id экземпляра
        name: Название
        rap: Recent average price
    """

    item_id: int
    serial_number: int | None = None
    uaid: int
    name: str
    rap: int


class TradeDetails(BaseModel):
    partner: User
    your_items: list[TradeItem]
    your_robux: int
    partner_items: list[TradeItem]
    partner_robux: int
    created: str
    expiration: str | None = None
    is_active: bool
    status: TradeStatus


class TradeUserRaw(RobloxModel):
    id: int
    name: str
    display_name: str


class TradeRaw(RobloxModel):
    id: int
    user: TradeUserRaw
    created: str
    expiration: str | None = None
    is_active: bool
    status: TradeStatus


class TradesResponse(PageResponse):
    data: list[TradeRaw]


class UserAssetRaw(RobloxModel):
    id: int
    serial_number: int | None = None
    asset_id: int
    name: str
    recent_average_price: int = 0


class TradeOfferRaw(RobloxModel):
    user: TradeUserRaw
    user_assets: list[UserAssetRaw]
    robux: int = 0


class TradeDetailsResponse(RobloxModel):
    offers: list[TradeOfferRaw]
    created: str
    expiration: str | None = None
    is_active: bool
    status: TradeStatus


class SendTradeResponse(RobloxModel):
    id: int


# ========== Presence ==========


class PresenceType(IntEnum):
    OFFLINE = 0
    ONLINE = 1
    IN_GAME = 2
    IN_STUDIO = 3
    INVISIBLE = 4


class UserPresence(RobloxModel):
    user_presence_type: PresenceType = PresenceType.OFFLINE
    last_location: str | None = None
    place_id: int | None = None
    root_place_id: int | None = None
    game_id: str | None = None
    universe_id: int | None = None
    user_id: int
    last_online: str | None = None

    @field_validator("user_presence_type", mode="before")
    @classmethod
    def _unknown_presence_is_offline(cls, value: Any) -> PresenceType:
        # Неизвестный или отсутствующий тип считаем оффлайном
        try:
            return PresenceType(int(value))
        except (TypeError, ValueError):
            return PresenceType.OFFLINE


class UserPresenceResponse(RobloxModel):
    user_presences: list[UserPresence]


# ========== Friends ==========


class FriendUserInformation(RobloxModel):
    id: int
    name: str = ""
    display_name: str = ""


class FriendsListResponse(RobloxModel):
    data: list[FriendUserInformation]


class FriendRequestInfo(RobloxModel):
    sent_at: str
    sender_id: int
    source_universe_id: int | None = None
    origin_source_type: str = "Unknown"


class FriendRequest(RobloxModel):
    friend_request: FriendRequestInfo
    mutual_friends_list: list[str] = Field(default_factory=list)
    id: int
    name: str
    display_name: str


class FriendRequestsResponse(PageResponse):
    data: list[FriendRequest]


# ========== Groups ==========


class Role(RobloxModel):
    id: int
    name: str
    rank: int
    member_count: int = 0


class RolesResponse(RobloxModel):
    group_id: int
    roles: list[Role]


class RoleMemberRaw(RobloxModel):
    user_id: int
    username: str
    display_name: str


class RoleMembersResponse(PageResponse):
    data: list[RoleMemberRaw]


# ========== Catalog ==========


class ItemType(str, Enum):
    ASSET = "Asset"
    BUNDLE = "Bundle"


class CreatorType(str, Enum):
    USER = "User"
    GROUP = "Group"


class Item(RobloxModel):
    """Предмет каталога для запроса деталей."""

    item_type: ItemType = ItemType.ASSET
    id: int


class ItemDetails(RobloxModel):
    id: int
    item_type: ItemType
    name: str = ""
    description: str = ""
    product_id: int | None = None
    collectible_item_id: str | None = None
    creator_has_verified_badge: bool | None = None
    creator_type: CreatorType | None = None
    creator_target_id: int | None = None
    creator_name: str = ""
    price: int | None = None
    lowest_price: int | None = None
    lowest_resale_price: int | None = None
    favorite_count: int | None = None
    purchase_count: int | None = None
    is_off_sale: bool | None = None
    has_resellers: bool | None = None
    remaining_stock: int | None = None
    total_quantity: int | None = None


class ItemDetailsResponse(RobloxModel):
    data: list[ItemDetails]


class Category(IntEnum):
    FEATURED = 0
    ALL = 1
    COLLECTIBLES = 2
    CLOTHING = 3
    BODY_PARTS = 4
    GEAR = 5
    ACCESSORIES = 11
    AVATAR_ANIMATIONS = 12
    COMMUNITY_CREATIONS = 13


class Subcategory(IntEnum):
    FEATURED = 0
    ALL = 1
    COLLECTIBLES = 2
    CLOTHING = 3
    BODY_PARTS = 4
    GEAR = 5
    HATS = 9
    FACES = 10
    SHIRTS = 12
    T_SHIRTS = 13
    PANTS = 14
    HEADS = 15
    ACCESSORIES = 19
    HAIR_ACCESSORIES = 20
    FACE_ACCESSORIES = 21
    NECK_ACCESSORIES = 22
    SHOULDER_ACCESSORIES = 23
    FRONT_ACCESSORIES = 24
    BACK_ACCESSORIES = 25
    WAIST_ACCESSORIES = 26
    AVATAR_ANIMATIONS = 27
    BUNDLES = 37
    ANIMATION_BUNDLES = 38
    EMOTE_ANIMATIONS = 39
    COMMUNITY_CREATIONS = 40
    MELEE = 41
    RANGED = 42
    EXPLOSIVE = 43
    POWER_UP = 44
    NAVIGATION = 45
    MUSICAL = 46
    SOCIAL = 47
    BUILDING = 48
    TRANSPORT = 49


class QueryGenre(IntEnum):
    """Жанры для поиска; нумерация отличается от жанров в деталях предмета."""

    TOWN_AND_CITY = 1
    MEDIEVAL = 2
    SCI_FI = 3
    FIGHTING = 4
    HORROR = 5
    NAVAL = 6
    ADVENTURE = 7
    SPORTS = 8
    COMEDY = 9
    WESTERN = 10
    MILITARY = 11
    BUILDING = 13
    FPS = 14
    RPG = 15


class SortAggregation(IntEnum):
    PAST_DAY = 0
    PAST_WEEK = 1
    PAST_MONTH = 2
    ALL_TIME = 3


class SortType(IntEnum):
    RELEVANCE = 0
    FAVORITED = 1
    SALES = 2
    UPDATED = 3
    PRICE_ASC = 4
    PRICE_DESC = 5


class SalesTypeFilter(IntEnum):
    ALL = 1
    COLLECTIBLES = 2
    PREMIUM = 3


class CatalogQueryLimit(IntEnum):
    """Допустимые значения limit для поиска по каталогу."""

    TEN = 10
    TWENTY_EIGHT = 28
    THIRTY = 30
    FIFTY = 50
    SIXTY = 60
    HUNDRED = 100
    HUNDRED_TWENTY = 120


# creatorType в поиске передаётся числом
CREATOR_TYPE_QUERY_VALUES = {CreatorType.USER: 1, CreatorType.GROUP: 2}


class AvatarSearchQuery(BaseModel):
    """Параметры поиска по каталогу аватаров.

    creator_id и creator_type задаются вместе. Без subcategory Roblox
    отдаёт только первую страницу.
    """

    category: Category | None = None
    creator_name: str | None = None
    creator_id: int | None = None
    creator_type: CreatorType | None = None
    query_genres: list[QueryGenre] = Field(default_factory=list)
    keyword: str | None = None
    sort_aggregation: SortAggregation | None = None
    sort_type: SortType | None = None
    subcategory: Subcategory | None = None
    min_price: int | None = None
    max_price: int | None = None
    limit: CatalogQueryLimit = CatalogQueryLimit.THIRTY
    sales_type_filter: SalesTypeFilter | None = None

    def to_params(self) -> dict[str, Any]:
        """Query-параметры catalog.roblox.com/v1/search/items."""
        params: dict[str, Any] = {}
        if self.category is not None:
            params["category"] = int(self.category)
        if self.creator_name is not None:
            params["creatorName"] = self.creator_name
        if self.creator_id is not None:
            params["creatorTargetId"] = self.creator_id
        if self.creator_type is not None:
            params["creatorType"] = CREATOR_TYPE_QUERY_VALUES[self.creator_type]
        if self.query_genres:
            params["genre"] = ",".join(str(int(genre)) for genre in self.query_genres)
        if self.keyword is not None:
            params["keyword"] = self.keyword
        if self.sort_aggregation is not None:
            params["sortAggregation"] = int(self.sort_aggregation)
        if self.sort_type is not None:
            params["sortType"] = int(self.sort_type)
        if self.subcategory is not None:
            params["subcategory"] = int(self.subcategory)
        if self.min_price is not None:
            params["minPrice"] = self.min_price
        if self.max_price is not None:
            params["maxPrice"] = self.max_price
        params["limit"] = int(self.limit)
        if self.sales_type_filter is not None:
            params["salesTypeFilter"] = int(self.sales_type_filter)
        return params


class AvatarSearchResponse(PageResponse):
    data: list[Item]


# ========== Thumbnails ==========


class ThumbnailSize(str, Enum):
    S30X30 = "30x30"
    S42X42 = "42x42"
    S50X50 = "50x50"
    S60X62 = "60x62"
    S75X75 = "75x75"
    S110X110 = "110x110"
    S140X140 = "140x140"
    S150X150 = "150x150"
    S160X100 = "160x100"
    S160X600 = "160x600"
    S250X250 = "250x250"
    S256X144 = "256x144"
    S300X250 = "300x250"
    S304X166 = "304x166"
    S384X216 = "384x216"
    S396X216 = "396x216"
    S420X420 = "420x420"
    S480X270 = "480x270"
    S512X512 = "512x512"
    S576X324 = "576x324"
    S700X700 = "700x700"
    S728X90 = "728x90"
    S768X432 = "768x432"
    S1200X80 = "1200x80"


class ThumbnailDataRaw(RobloxModel):
    request_id: str
    error_code: int = 0
    error_message: str = ""
    target_id: int
    state: str
    image_url: str


class ThumbnailResponse(RobloxModel):
    data: list[ThumbnailDataRaw]


# ========== Private messages ==========


class MessageTab(str, Enum):
    INBOX = "Inbox"
    SENT = "Sent"
    ARCHIVE = "Archive"


class MessageUser(RobloxModel):
    id: int
    name: str
    display_name: str


class Message(RobloxModel):
    id: int
    sender: MessageUser
    recipient: MessageUser
    subject: str
    body: str
    created: str
    updated: str
    is_read: bool
    is_system_message: bool = False
    is_report_abuse_displayed: bool = False


class MessagesResponse(RobloxModel):
    collection: list[Message]
    total_collection_size: int
    total_pages: int
    page_number: int


class MessagesPageMetadata(BaseModel):
    total_message_count: int
    page_number: int
    total_pages: int


# ========== Marketplace (apis.roblox.com) ==========


class NonTradableLimitedDetails(RobloxModel):
    """Детали UGC limited, который нельзя передавать в сделках."""

    item_id: int = Field(alias="itemTargetId")
    collectible_item_id: str
    collectible_product_id: str
    name: str
    description: str = ""
    creator_has_verified_badge: bool = False
    creator_type: CreatorType
    creator_id: int
    creator_name: str
    price: int
    lowest_price: int
    remaining_stock: int = Field(alias="unitsAvailableForConsumption")
    total_stock: int = Field(alias="assetStock")
    error_code: int | None = None


class PurchaseNonTradableLimitedResponse(RobloxModel):
    purchase_result: str = ""
    purchased: bool
    error_message: str | None = None


# ========== Games ==========


class GameCreator(RobloxModel):
    id: int
    creator_type: CreatorType = Field(alias="type")


class GameRootPlace(RobloxModel):
    id: int
    place_type: str = Field(alias="type")


class GameInformation(RobloxModel):
    """Игра пользователя или группы (games/v2)."""

    id: int
    name: str
    description: str | None = None
    creator: GameCreator
    root_place: GameRootPlace
    created: str
    updated: str
    place_visits: int


class GamesResponse(PageResponse):
    data: list[GameInformation]


# ========== Assets (apis.roblox.com) ==========


class ClassicClothingType(str, Enum):
    SHIRT = "Shirt"
    PANTS = "Pants"
    T_SHIRT = "TShirt"

    @property
    def asset_type(self) -> str:
        """Значение assetType в запросе загрузки."""
        if self is ClassicClothingType.T_SHIRT:
            return "Tshirt"
        return self.value

    @property
    def upload_price(self) -> int:
        """Стоимость загрузки в Robux; футболки бесплатны."""
        if self is ClassicClothingType.T_SHIRT:
            return 0
        return 10


class AssetCreator(RobloxModel):
    user_id: int | None = None
    group_id: int | None = None


class AssetCreationContext(RobloxModel):
    creator: AssetCreator


class AssetModerationResult(RobloxModel):
    moderation_state: str


class AssetInfo(RobloxModel):
    """Ответ assets/user-auth/v1/assets/{id}."""

    asset_id: int
    asset_type: str
    display_name: str = ""
    description: str = ""
    creation_context: AssetCreationContext | None = None
    moderation_result: AssetModerationResult | None = None
    state: str | None = None
    revision_id: str | None = None
    revision_create_time: str | None = None


class AssetOperation(RobloxModel):
    """Операция загрузки ассета; done становится true после обработки."""

    path: str = ""
    operation_id: str | None = None
    done: bool = False


class NewAnimation(BaseModel):
    """Анимация для загрузки.

    Attributes:
        name: Название
        description: Описание
        group_id: Группа-владелец; None для личной анимации
        animation_data: Содержимое файла анимации
    """

    name: str
    description: str = ""
    group_id: int | None = None
    animation_data: bytes
