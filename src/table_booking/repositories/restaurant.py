from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from table_booking.core.exceptions import PolicyViolationError
from table_booking.models import Booking, Restaurant, User
from table_booking.repositories.base import CRUDBase
from table_booking.schemas.restaurant import RestaurantCreate, RestaurantUpdate
from table_booking.services.availability_service import (
    AvailabilityService,
    restaurant_lock,
)
from table_booking.utils.enums import BookingStatus


class RestaurantRepository(
    CRUDBase[Restaurant, RestaurantCreate, RestaurantUpdate],
):
    """Репозиторий для операций с ресторанами."""

    def __init__(self) -> None:
        """Инициализация репозитория ресторанов."""
        super().__init__(Restaurant)

    async def get_multi_active(
        self,
        session: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 100,
        show_all: bool = False,
    ) -> List[Restaurant]:
        """Получает список ресторанов, по умолчанию только активных."""
        conditions = []
        if not show_all:
            conditions.append(Restaurant.is_active.is_(True))
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=(Restaurant.name,),
            offset=skip,
            limit=limit,
        )

    async def get_by_owner(
        self,
        session: AsyncSession,
        owner_id: UUID,
    ) -> List[Restaurant]:
        """Рестораны, зарегистрированные пользователем."""
        return await self.get(
            session,
            Restaurant.is_active.is_(True),
            many=True,
            order_by=(Restaurant.created_at,),
            owner_id=owner_id,
        )

    async def create_with_owner(
        self,
        session: AsyncSession,
        obj_in: RestaurantCreate,
        owner: User,
    ) -> Restaurant:
        """Регистрирует ресторан от имени пользователя."""
        return await self.create(session, obj_in, owner_id=owner.id)

    async def update_with_capacity_check(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        obj_in: RestaurantUpdate,
        now: Optional[datetime] = None,
    ) -> Restaurant:
        """Обновляет профиль ресторана.

        Уменьшение вместимости проверяется по пиковой занятости будущих
        броней под той же блокировкой, что и допуск новых броней.
        """
        async with restaurant_lock(restaurant_id):
            try:
                db_obj = await AvailabilityService.get_restaurant(
                    session,
                    restaurant_id,
                    for_update=True,
                )
                if obj_in.total_seats is not None:
                    await AvailabilityService.validate_capacity_change(
                        session,
                        db_obj,
                        obj_in.total_seats,
                        now,
                    )
                return await self.update_obj(session, db_obj, obj_in)
            except Exception:
                await session.rollback()
                raise

    async def count_pending_bookings(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        now: Optional[datetime] = None,
    ) -> int:
        """Количество действующих броней, которые ещё не закончились."""
        now = now or datetime.now(timezone.utc)
        stmt = select(func.count(Booking.id)).where(
            Booking.restaurant_id == restaurant_id,
            Booking.status != BookingStatus.CANCELED,
            Booking.ends_at > now,
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    async def delete_with_policy(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        now: Optional[datetime] = None,
    ) -> Restaurant:
        """Мягко удаляет ресторан, если у него нет предстоящих броней."""
        async with restaurant_lock(restaurant_id):
            try:
                db_obj = await AvailabilityService.get_restaurant(
                    session,
                    restaurant_id,
                    for_update=True,
                )
                pending = await self.count_pending_bookings(
                    session,
                    restaurant_id,
                    now,
                )
                if pending:
                    raise PolicyViolationError(
                        'Нельзя удалить ресторан с предстоящими '
                        f'бронированиями: {pending}',
                    )
                db_obj.is_active = False
                session.add(db_obj)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
        await session.refresh(db_obj)
        return db_obj


restaurant_repository = RestaurantRepository()
