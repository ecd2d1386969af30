from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from loguru import logger

from table_booking.core.config import settings
from table_booking.core.db import DbSession
from table_booking.core.exceptions import InvalidArgumentError, NotFoundError
from table_booking.models import Booking, User
from table_booking.repositories.booking import booking_repository
from table_booking.services.notification import send_notification_task
from table_booking.utils.dates import ensure_utc

DATETIME_FORMAT = '%d.%m.%Y %H:%M UTC'


def format_booking(booking: Booking) -> str:
    """Текстовое описание брони для писем."""
    restaurant = booking.restaurant
    return (
        f'Ресторан: {restaurant.name}\n'
        f'Телефон: {restaurant.contact}\n'
        f'Время: {ensure_utc(booking.reservation_time):{DATETIME_FORMAT}}\n'
        f'Длительность: {booking.duration.value}\n'
        f'Количество гостей: {booking.guests}\n'
        f'Гость: {booking.user_name}\n'
        f'Статус: {booking.status.value}\n'
    )


class NotificationService:
    """Сервис для управления уведомлениями о бронированиях.

    Письма получают гость (контактный email брони) и владелец ресторана.
    """

    @staticmethod
    async def _load(session: DbSession, booking_id: UUID) -> Booking:
        booking = await booking_repository.get_with_relations(
            session,
            booking_id,
        )
        if booking is None:
            raise NotFoundError('Бронирование не найдено')
        return booking

    @staticmethod
    def _recipients(booking: Booking) -> list[Optional[str]]:
        owner = booking.restaurant.owner
        return [booking.user_email, owner.email if owner else None]

    @classmethod
    async def _notify(
        cls,
        session: DbSession,
        booking_id: UUID,
        subject: str,
        headline: str,
    ) -> None:
        booking = await cls._load(session, booking_id)
        text = f'{headline}:\n\n{format_booking(booking)}'
        if send_notification_task(
            emails=cls._recipients(booking),
            text=text,
            subject=subject,
        ):
            logger.info(
                f'Уведомление "{subject}" по брони {booking_id} '
                'поставлено в очередь',
            )

    @classmethod
    async def send_booking_created_notification(
        cls,
        session: DbSession,
        booking_id: UUID,
    ) -> None:
        """Отправляет уведомление о создании бронирования."""
        await cls._notify(
            session,
            booking_id,
            'Новое бронирование',
            'Бронирование подтверждено',
        )

    @classmethod
    async def send_booking_updated_notification(
        cls,
        session: DbSession,
        booking_id: UUID,
    ) -> None:
        """Отправляет уведомление об изменении бронирования."""
        await cls._notify(
            session,
            booking_id,
            'Изменение бронирования',
            'Бронирование изменено',
        )

    @classmethod
    async def send_booking_canceled_notification(
        cls,
        session: DbSession,
        booking_id: UUID,
    ) -> None:
        """Отправляет уведомление об отмене бронирования."""
        await cls._notify(
            session,
            booking_id,
            'Отмена бронирования',
            'Бронирование отменено',
        )

    @classmethod
    async def send_booking_reminder(
        cls,
        session: DbSession,
        booking_id: UUID,
        reminder_minutes: int = 60,
        now: Optional[datetime] = None,
    ) -> datetime:
        """Планирует напоминание гостю и возвращает время отправки.

        Raises:
            NotFoundError: Бронь не найдена или отменена
            InvalidArgumentError: Время напоминания уже прошло

        """
        booking = await booking_repository.get_active(session, booking_id)
        reminder_time = ensure_utc(booking.reservation_time) - timedelta(
            minutes=reminder_minutes,
        )
        if reminder_time < (now or datetime.now(timezone.utc)):
            logger.error(
                f'Нельзя установить напоминание на прошедшее время '
                f'для бронирования {booking_id}',
            )
            raise InvalidArgumentError(
                'Нельзя установить напоминание на прошедшее время',
                field='reminderMinutes',
            )
        send_notification_task(
            emails=[booking.user_email],
            text=(
                f'Напоминание о вашем бронировании через '
                f'{reminder_minutes} минут:\n\n{format_booking(booking)}'
            ),
            subject='Напоминание о бронировании',
            eta=reminder_time,
        )
        logger.info(
            f'Напоминание о бронировании {booking_id} запланировано '
            f'на {reminder_time}',
        )
        return reminder_time

    @staticmethod
    def send_verification_email(user: User, token: str) -> None:
        """Отправляет ссылку подтверждения почты после регистрации."""
        link = f'{settings.FRONTEND_URL}/verify/{token}'
        send_notification_task(
            emails=[user.email],
            text=(
                f'Здравствуйте, {user.name}!\n\n'
                f'Подтвердите почту по ссылке: {link}\n'
                f'Ссылка действует '
                f'{settings.VERIFICATION_TOKEN_EXPIRE_HOURS} ч.'
            ),
            subject='Подтверждение регистрации',
        )
        logger.info(f'Письмо подтверждения отправлено на {user.email}')
