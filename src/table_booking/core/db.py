"""Подключение к БД сервиса бронирования.

Одна сессия живёт один запрос: допуск брони открывает в ней
транзакцию, блокирует строку ресторана и фиксирует её сам.
"""

import uuid
from datetime import datetime
from typing import Annotated, AsyncIterator

from fastapi import Depends
from sqlalchemy import Boolean, DateTime, Uuid, func, text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    declared_attr,
    mapped_column,
)

from table_booking.core.config import settings


class Base(DeclarativeBase):
    """Общие колонки пользователей, ресторанов и броней.

    is_active - флаг мягкого удаления: отменённые брони и удалённые
    рестораны остаются в таблице, но не участвуют в расчёте мест.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:  # noqa: N805
        return cls.__name__.lower()

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text('true'),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


engine = create_async_engine(settings.db_url, pool_pre_ping=True)

SessionFactory = async_sessionmaker(engine)


async def get_async_session() -> AsyncIterator[AsyncSession]:
    """Сессия на запрос; допуск брони коммитит её внутри блокировки."""
    async with SessionFactory() as session:
        yield session


DbSession = Annotated[AsyncSession, Depends(get_async_session)]
