from typing import Annotated

from fastapi import Depends

from table_booking.services.cache_service import CacheService, cache_service


async def get_cache_service() -> CacheService:
    """Общий клиент кеша; в тестах подменяется через dependency_overrides."""
    return cache_service


Cache = Annotated[CacheService, Depends(get_cache_service)]
