from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from table_booking.api.endpoints import routers
from table_booking.core.db import SessionFactory, engine
from table_booking.core.exception_handler import (
    http_exception_handler,
    validation_exception_handler,
)
from table_booking.core.init_admin import upsert_admin_if_not_exist
from table_booking.core.logging import configure_logging
from table_booking.middleware.http_logging import logging_middleware
from table_booking.services.cache_service import cache_service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator:
    """Логгер, кеш и учётка администратора при старте приложения."""
    configure_logging()
    await cache_service.connect()
    async with SessionFactory() as session:
        await upsert_admin_if_not_exist(session)
    logger.info('Сервис бронирования запущен')
    yield
    logger.info('Сервис бронирования остановлен')
    await cache_service.disconnect()
    await engine.dispose()


app = FastAPI(
    title='Система бронирования мест в ресторанах',
    description=(
        'API для расчёта свободных мест и бронирования столиков '
        'в ресторанах'
    ),
    version='0.1.0',
    lifespan=lifespan,
    root_path='/api',
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)

app.middleware('http')(logging_middleware)


for router in routers:
    app.include_router(router)
