from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from table_booking.core.exceptions import NotFoundError
from table_booking.models import Booking, Restaurant
from table_booking.repositories.base import CRUDBase
from table_booking.schemas.booking import BookingCreate, BookingUpdate
from table_booking.services.availability_service import (
    AvailabilityService,
    restaurant_lock,
    run_admission,
)
from table_booking.utils.dates import ensure_utc
from table_booking.utils.enums import BookingStatus, ReservationDuration


class BookingRepository(CRUDBase[Booking, BookingCreate, BookingUpdate]):
    """Репозиторий для операций с бронированиями."""

    def __init__(self) -> None:
        """Инициализация репозитория бронирований."""
        super().__init__(Booking)

    async def get_with_relations(
        self,
        session: AsyncSession,
        booking_id: UUID,
    ) -> Optional[Booking]:
        """Получает бронирование вместе с рестораном и его владельцем."""
        return await self.get(
            session,
            id=booking_id,
            options=[
                selectinload(Booking.restaurant).selectinload(
                    Restaurant.owner,
                ),
            ],
        )

    async def get_active(
        self,
        session: AsyncSession,
        booking_id: UUID,
        *,
        for_update: bool = False,
    ) -> Booking:
        """Возвращает неотменённую бронь или бросает NotFoundError."""
        booking = await self.get(
            session,
            Booking.status != BookingStatus.CANCELED,
            id=booking_id,
            for_update=for_update,
        )
        if booking is None:
            raise NotFoundError('Бронирование не найдено')
        return booking

    async def get_multi_filtered(
        self,
        session: AsyncSession,
        *,
        restaurant_id: Optional[UUID] = None,
        user_email: Optional[str] = None,
        show_all: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        """Получает список бронирований по ресторану или email гостя."""
        conditions = []
        if not show_all:
            conditions.append(Booking.is_active.is_(True))
        if restaurant_id:
            conditions.append(Booking.restaurant_id == restaurant_id)
        if user_email:
            conditions.append(Booking.user_email == user_email.lower())
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=(Booking.reservation_time,),
            offset=skip,
            limit=limit,
        )

    async def create_with_admission(
        self,
        session: AsyncSession,
        obj_in: BookingCreate,
    ) -> Booking:
        """Создает бронирование, если в окне хватает мест.

        Пересчёт занятости и запись брони выполняются одной транзакцией
        под блокировкой ресторана.
        """

        async def attempt() -> Booking:
            async with restaurant_lock(obj_in.restaurant_id):
                try:
                    await AvailabilityService.admit_reservation(
                        session,
                        obj_in.restaurant_id,
                        obj_in.reservation_time,
                        obj_in.duration,
                        obj_in.guests,
                    )
                    db_obj = self.model(
                        **obj_in.model_dump(),
                        ends_at=obj_in.reservation_time + obj_in.duration.span,
                    )
                    db_obj.user_email = db_obj.user_email.lower()
                    session.add(db_obj)
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
            await session.refresh(db_obj)
            return db_obj

        return await run_admission(attempt)

    async def update_with_admission(
        self,
        session: AsyncSession,
        booking_id: UUID,
        obj_in: BookingUpdate,
    ) -> Booking:
        """Изменяет время, длительность или гостей с повторным допуском.

        Сама изменяемая бронь исключается из суммы занятых мест, новое
        количество гостей проверяется целиком.
        """
        current = await self.get_active(session, booking_id)
        restaurant_id = current.restaurant_id

        async def attempt() -> Booking:
            async with restaurant_lock(restaurant_id):
                try:
                    db_obj = await self.get_active(
                        session,
                        booking_id,
                        for_update=True,
                    )
                    reservation_time, duration, guests = self._merge_changes(
                        db_obj,
                        obj_in,
                    )
                    await AvailabilityService.admit_reservation(
                        session,
                        restaurant_id,
                        reservation_time,
                        duration,
                        guests,
                        exclude_booking_id=db_obj.id,
                    )
                    db_obj.reservation_time = reservation_time
                    db_obj.duration = duration
                    db_obj.ends_at = reservation_time + duration.span
                    db_obj.guests = guests
                    session.add(db_obj)
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
            await session.refresh(db_obj)
            return db_obj

        return await run_admission(attempt)

    async def cancel(
        self,
        session: AsyncSession,
        booking_id: UUID,
    ) -> Booking:
        """Отменяет бронь без проверки мест; места освобождаются сразу.

        Повторная отмена уже отменённой брони бросает NotFoundError.
        """
        try:
            db_obj = await self.get_active(
                session,
                booking_id,
                for_update=True,
            )
            db_obj.status = BookingStatus.CANCELED
            db_obj.is_active = False
            session.add(db_obj)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await session.refresh(db_obj)
        return db_obj

    @staticmethod
    def _merge_changes(
        db_obj: Booking,
        obj_in: BookingUpdate,
    ) -> tuple[datetime, ReservationDuration, int]:
        """Новые время, длительность и гости с учётом непереданных полей."""
        reservation_time = ensure_utc(
            obj_in.reservation_time or db_obj.reservation_time,
        )
        duration = obj_in.duration or db_obj.duration
        guests = obj_in.guests if obj_in.guests is not None else db_obj.guests
        return reservation_time, duration, guests


booking_repository = BookingRepository()
