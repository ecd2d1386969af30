import json
from time import perf_counter
from typing import Any, Optional

from loguru import logger
from redis.asyncio import Redis
from redis.exceptions import RedisError

from table_booking.core.config import settings
from table_booking.core.constants import (
    RESTAURANTS_CACHE_PREFIX,
    RESTAURANTS_LIST_CACHE_KEY,
)


class CacheService:
    """Сервис для работы с кешем Redis.

    Кеш необязателен: без подключения все операции становятся
    промахами, а ошибки Redis только логируются.
    """

    def __init__(self) -> None:
        self.redis: Optional[Redis] = None
        self.ttl = settings.REDIS_CACHE_TTL

    async def connect(self) -> None:
        """Установка подключения к Redis."""
        try:
            self.redis = Redis.from_url(
                settings.redis_url,
                encoding='utf-8',
                decode_responses=True,
            )
            await self.redis.ping()
            logger.info('Успешное подключение к Redis')
        except (RedisError, OSError) as e:
            logger.error(f'Ошибка подключения к Redis: {e}')
            self.redis = None

    async def disconnect(self) -> None:
        """Закрытие подключения к Redis."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info('Отключение от Redis')

    async def ping(self) -> bool:
        """Проверка доступности Redis для healthcheck."""
        if not self.redis:
            return False
        try:
            return bool(await self.redis.ping())
        except (RedisError, OSError) as e:
            logger.error(f'Redis недоступен: {e}')
            return False

    async def get(self, key: str) -> Optional[Any]:
        """Получение значения по ключу."""
        if not self.redis:
            return None
        try:
            started = perf_counter()
            data = await self.redis.get(key)
            elapsed = (perf_counter() - started) * 1000
        except RedisError as e:
            logger.error(f'Ошибка получения из кеша {key}: {e}')
            return None
        if data is None:
            logger.debug(f'Кеш промах: {key} | время: {elapsed:.2f}мс')
            return None
        logger.debug(
            f'Кеш попадание: {key} | размер: {len(data)} байт | '
            f'время: {elapsed:.2f}мс',
        )
        return json.loads(data)

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
    ) -> bool:
        """Сохранение значения в кеш."""
        if not self.redis:
            return False
        try:
            await self.redis.setex(
                key,
                ttl or self.ttl,
                json.dumps(value, default=str),
            )
            return True
        except RedisError as e:
            logger.error(f'Ошибка сохранения в кеш {key}: {e}')
            return False

    async def delete_pattern(self, pattern: str) -> bool:
        """Удаление ключей по шаблону."""
        if not self.redis:
            return False
        try:
            keys = [key async for key in self.redis.scan_iter(match=pattern)]
            if keys:
                await self.redis.delete(*keys)
                logger.info(
                    f'Удалено ключей по шаблону {pattern}: {len(keys)}',
                )
            return True
        except RedisError as e:
            logger.error(f'Ошибка удаления по шаблону {pattern}: {e}')
            return False

    async def get_restaurants(self) -> Optional[list[dict]]:
        """Закешированный список активных ресторанов."""
        return await self.get(RESTAURANTS_LIST_CACHE_KEY)

    async def set_restaurants(self, restaurants: list[dict]) -> bool:
        return await self.set(RESTAURANTS_LIST_CACHE_KEY, restaurants)

    async def clear_restaurants_cache(self) -> None:
        """Очистка кеша ресторанов после любых изменений профиля."""
        await self.delete_pattern(f'{RESTAURANTS_CACHE_PREFIX}:*')


cache_service = CacheService()
