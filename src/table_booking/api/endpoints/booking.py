from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from loguru import logger
from pydantic import EmailStr

from table_booking.core.db import DbSession
from table_booking.core.exceptions import BookingServiceError
from table_booking.repositories.booking import booking_repository
from table_booking.schemas.booking import (
    AvailabilityInfo,
    BookingCreate,
    BookingInfo,
    BookingUpdate,
)
from table_booking.schemas.common import (
    CapacityErrorResponse,
    ErrorResponse,
    InvalidArgumentResponse,
)
from table_booking.services.availability_service import AvailabilityService
from table_booking.services.send_email_service import NotificationService
from table_booking.utils.enums import ReservationDuration
from table_booking.utils.http import (
    as_http_exception,
    build_error,
    internal_server_error,
)
from table_booking.utils.logging_decorator import event_logger

router = APIRouter(prefix='/bookings', tags=['Бронирования'])

ADMISSION_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {'model': InvalidArgumentResponse},
    status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
    status.HTTP_409_CONFLICT: {'model': CapacityErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {'model': ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
}


@router.get(
    '/availability',
    response_model=AvailabilityInfo,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': InvalidArgumentResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_availability(
    session: DbSession,
    restaurant_id: UUID = Query(..., alias='restaurantId'),
    reservation_time: datetime = Query(
        ...,
        alias='time',
        description='Начало окна в ISO-8601',
    ),
    duration: ReservationDuration = Query(
        ...,
        description='Длительность: 15min, 30min, 45min, 1h',
    ),
    exclude_booking_id: Optional[UUID] = Query(
        None,
        alias='excludeBookingId',
        description='Бронь, которая не учитывается (при изменении)',
    ),
) -> AvailabilityInfo:
    """Возвращает количество свободных мест на выбранное окно.

    Ответ справочный: окончательная проверка мест выполняется при
    создании или изменении брони.
    """
    try:
        availability = await AvailabilityService.check_availability(
            session,
            restaurant_id,
            reservation_time,
            duration,
            exclude_booking_id,
        )
        return AvailabilityInfo(
            restaurant_id=restaurant_id,
            reservation_time=reservation_time,
            duration=duration,
            available_seats=availability.available_seats,
            total_seats=availability.total_seats,
        )
    except BookingServiceError as e:
        logger.warning(f'Ошибка расчёта мест: {e.message}')
        raise as_http_exception(e)
    except Exception as e:
        logger.error(f'Ошибка при расчёте свободных мест: {str(e)}')
        raise internal_server_error()


@router.post(
    '/',
    response_model=BookingInfo,
    status_code=status.HTTP_201_CREATED,
    responses=ADMISSION_RESPONSES,
)
@event_logger('Создана', 'Booking')
async def create_booking(
    booking_data: BookingCreate,
    session: DbSession,
) -> BookingInfo:
    """Создает бронирование, если на окно хватает мест.

    Args:
        booking_data: Данные для создания бронирования
        session: Асинхронная сессия базы данных
    Returns:
        BookingInfo: Созданное бронирование
    Raises:
        HTTPException: 404 если ресторан не найден
        HTTPException: 409 если мест недостаточно (с availableSeats)
        HTTPException: 503 если конкурентные изменения не удалось разрешить

    """
    try:
        booking = await booking_repository.create_with_admission(
            session,
            booking_data,
        )
    except BookingServiceError as e:
        logger.warning(f'Бронирование не создано: {e.message}')
        raise as_http_exception(e)
    except Exception as e:
        logger.error(f'Неожиданная ошибка при создании бронирования: {str(e)}')
        raise internal_server_error(
            'Внутренняя ошибка сервера при создании бронирования',
        )
    try:
        await NotificationService.send_booking_created_notification(
            session,
            booking.id,
        )
    except Exception as e:
        logger.error(f'Ошибка отправки уведомления: {str(e)}')
    return booking


@router.get(
    '/',
    response_model=list[BookingInfo],
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_bookings_by_email(
    session: DbSession,
    user_email: EmailStr = Query(..., alias='userEmail'),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[BookingInfo]:
    """Действующие бронирования по контактному email гостя."""
    try:
        return await booking_repository.get_multi_filtered(
            session,
            user_email=user_email,
            skip=skip,
            limit=limit,
        )
    except Exception as e:
        logger.error(f'Ошибка при получении списка бронирований: {str(e)}')
        raise internal_server_error()


@router.get(
    '/{booking_id}',
    response_model=BookingInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_booking_by_id(
    booking_id: UUID,
    session: DbSession,
) -> BookingInfo:
    """Получает бронирование по идентификатору, включая отменённые."""
    try:
        booking = await booking_repository.get(session, id=booking_id)
        if not booking:
            logger.warning(f'Бронирование {booking_id} не найдено')
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=build_error(
                    'Бронирование не найдено',
                    status.HTTP_404_NOT_FOUND,
                ),
            )
        return booking
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            f'Ошибка при получении бронирования {booking_id}: {str(e)}',
        )
        raise internal_server_error()


@router.put(
    '/{booking_id}',
    response_model=BookingInfo,
    responses=ADMISSION_RESPONSES,
)
@event_logger('Обновлена', 'Booking')
async def update_booking(
    booking_id: UUID,
    update_data: BookingUpdate,
    session: DbSession,
) -> BookingInfo:
    """Изменяет время, длительность или количество гостей брони.

    Места проверяются заново, при этом сама бронь из занятости
    исключается.
    """
    try:
        booking = await booking_repository.update_with_admission(
            session,
            booking_id,
            update_data,
        )
    except BookingServiceError as e:
        logger.warning(f'Бронирование {booking_id} не изменено: {e.message}')
        raise as_http_exception(e)
    except Exception as e:
        logger.error(
            f'Неожиданная ошибка при обновлении бронирования: {str(e)}',
        )
        raise internal_server_error(
            'Внутренняя ошибка сервера при обновлении бронирования',
        )
    try:
        await NotificationService.send_booking_updated_notification(
            session,
            booking.id,
        )
    except Exception as e:
        logger.error(f'Ошибка отправки уведомления: {str(e)}')
    return booking


@router.delete(
    '/{booking_id}',
    response_model=BookingInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Отменена', 'Booking')
async def cancel_booking(
    booking_id: UUID,
    session: DbSession,
) -> BookingInfo:
    """Отменяет бронирование и сразу освобождает места."""
    try:
        booking = await booking_repository.cancel(session, booking_id)
    except BookingServiceError as e:
        logger.warning(f'Бронирование {booking_id} не отменено: {e.message}')
        raise as_http_exception(e)
    except Exception as e:
        logger.error(f'Неожиданная ошибка при отмене бронирования: {str(e)}')
        raise internal_server_error(
            'Внутренняя ошибка сервера при отмене бронирования',
        )
    try:
        await NotificationService.send_booking_canceled_notification(
            session,
            booking.id,
        )
    except Exception as e:
        logger.error(f'Ошибка отправки уведомления: {str(e)}')
    return booking


@router.post(
    '/{booking_id}/reminder',
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': InvalidArgumentResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def schedule_booking_reminder(
    booking_id: UUID,
    session: DbSession,
    reminder_minutes: int = Query(
        60,
        alias='reminderMinutes',
        ge=1,
        description='За сколько минут напоминать',
    ),
) -> dict:
    """Планирует напоминание гостю о бронировании."""
    try:
        reminder_time = await NotificationService.send_booking_reminder(
            session,
            booking_id,
            reminder_minutes,
        )
    except BookingServiceError as e:
        logger.warning(f'Напоминание не запланировано: {e.message}')
        raise as_http_exception(e)
    except Exception as e:
        logger.error(f'Ошибка планирования напоминания: {str(e)}')
        raise internal_server_error()
    return {
        'status': 'success',
        'message': (
            f'Напоминание запланировано за {reminder_minutes} '
            'минут до бронирования'
        ),
        'remindAt': reminder_time.isoformat(),
    }
