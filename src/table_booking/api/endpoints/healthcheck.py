from typing import Dict

from fastapi import APIRouter
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from table_booking.core.db import DbSession
from table_booking.core.dependencies import Cache

router = APIRouter(prefix='/healthcheck', tags=['Healthcheck'])


@router.get('/db')
async def db_health(session: DbSession) -> Dict[str, str]:
    """Проверка состояния БД."""
    try:
        await session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        logger.error(f'Ошибка проверки БД: {str(e)}')
        return {'status': 'error', 'details': str(e)}
    logger.debug('Проверка БД: успешно')
    return {'status': 'ok'}


@router.get('/redis')
async def redis_health(
    cache: Cache,
) -> Dict[str, str]:
    """Проверка состояния Redis."""
    if await cache.ping():
        logger.debug('Проверка Redis: успешно')
        return {'status': 'ok'}
    return {'status': 'error', 'details': 'Redis не подключен'}
