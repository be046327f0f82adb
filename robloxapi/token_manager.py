"""Менеджер x-csrf-token для Roblox API.

Хранит текущий anti-forgery токен клиента. Токен не запрашивается
отдельным вызовом: Roblox сам присылает новый в заголовке x-csrf-token,
когда отклоняет старый, а иногда и в успешных ответах.
"""

import asyncio
import hashlib
import logging

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

XCSRF_HEADER = "x-csrf-token"


def fingerprint(secret: str) -> str:
    """Короткий отпечаток секрета для логов и ключей экземпляров.

    Args:
        secret: Значение .ROBLOSECURITY

    Returns:
        Первые 16 символов SHA1 хеша в hex формате
    """
    return hashlib.sha1(secret.encode("utf-8")).hexdigest()[:16]


class XcsrfTokenManager:
    """Менеджер x-csrf-token для конкретного клиента.

    Чтение токена не блокируется. Запись идёт под asyncio.Lock и
    всегда целиком заменяет значение, поэтому конкурентные обновления
    не могут оставить токен в промежуточном состоянии.
    """

    def __init__(self, key_id: str, token: str = "") -> None:
        """Инициализация менеджера токенов.

        Args:
            key_id: Идентификатор клиента (для логов)
            token: Начальное значение токена, по умолчанию пустое
        """
        self._key_id = key_id
        self._token = token
        self._token_version: int = 0
        self._lock = asyncio.Lock()

    @property
    def token(self) -> str:
        """Текущий x-csrf-token (пустая строка, если ещё не получен)."""
        return self._token

    @property
    def token_version(self) -> int:
        """Сколько раз токен был заменён."""
        return self._token_version

    async def update_token(self, token: str) -> bool:
        """Заменить токен значением, пришедшим от сервера.

        Args:
            token: Новый токен из заголовка ответа

        Returns:
            True если токен изменился, False если пустой или тот же
        """
        if not token:
            return False

        async with self._lock:
            if token == self._token:
                return False

            self._token = token
            self._token_version += 1
            logger.info(
                "x-csrf-token обновлён для key_id=%s (версия: %d)",
                self._key_id,
                self._token_version,
            )
        return True

    async def reset(self) -> None:
        """Сбросить токен в пустое значение."""
        async with self._lock:
            self._token = ""
            logger.debug("x-csrf-token сброшен для key_id=%s", self._key_id)
