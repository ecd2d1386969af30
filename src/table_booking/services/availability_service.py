import asyncio
from collections import Counter
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import (
    AsyncIterator,
    Awaitable,
    Callable,
    Iterable,
    Optional,
    Protocol,
    Sequence,
    TypeVar,
)
from uuid import UUID

from loguru import logger
from sqlalchemy import Row, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from table_booking.core.config import settings
from table_booking.core.constants import (
    RETRYABLE_DB_MESSAGES,
    RETRYABLE_SQLSTATES,
)
from table_booking.core.exceptions import (
    CapacityExceededError,
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    PolicyViolationError,
)
from table_booking.models import Booking, Restaurant
from table_booking.utils.dates import ensure_utc, parse_instant
from table_booking.utils.enums import BookingStatus, ReservationDuration

T = TypeVar('T')

# Блокировки живут, пока ими кто-то пользуется или ждёт их
_restaurant_locks: dict[UUID, asyncio.Lock] = {}
_lock_users: Counter[UUID] = Counter()


@dataclass(frozen=True)
class TimeWindow:
    """Полуинтервал времени [start, end)."""

    start: datetime
    end: datetime

    @classmethod
    def from_duration(
        cls,
        start: datetime | str,
        duration: ReservationDuration | str,
    ) -> 'TimeWindow':
        """Строит окно брони по началу и токену длительности."""
        begin = parse_instant(start)
        return cls(begin, begin + ReservationDuration.parse(duration).span)

    def overlaps(self, other: 'TimeWindow') -> bool:
        """Касание концами пересечением не считается."""
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class SeatAvailability:
    """Вместимость ресторана и занятость окна."""

    total_seats: int
    occupied_seats: int

    @property
    def remaining_seats(self) -> int:
        """Точный остаток, может быть отрицательным."""
        return self.total_seats - self.occupied_seats

    @property
    def available_seats(self) -> int:
        """Остаток для показа пользователю, не меньше нуля."""
        return max(self.remaining_seats, 0)

    def can_admit(self, guests: int) -> bool:
        return self.occupied_seats + guests <= self.total_seats


class Occupying(Protocol):
    reservation_time: datetime
    ends_at: datetime
    guests: int


def validate_guests(value: object) -> int:
    """Проверяет, что количество гостей - положительное целое."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidArgumentError(
            'Количество гостей должно быть положительным целым числом',
            field='guests',
        )
    return value


@asynccontextmanager
async def restaurant_lock(restaurant_id: UUID) -> AsyncIterator[None]:
    """Взаимоисключение допуска броней одного ресторана внутри процесса.

    Между процессами допуск сериализуется блокировкой строки ресторана
    (SELECT ... FOR UPDATE) в admit_reservation.
    """
    lock = _restaurant_locks.setdefault(restaurant_id, asyncio.Lock())
    _lock_users[restaurant_id] += 1
    try:
        async with lock:
            yield
    finally:
        _lock_users[restaurant_id] -= 1
        if not _lock_users[restaurant_id]:
            del _lock_users[restaurant_id]
            del _restaurant_locks[restaurant_id]


def is_retryable_error(error: BaseException) -> bool:
    """Транзиентная ошибка БД: сериализация, дедлок, занятая блокировка."""
    if not isinstance(error, DBAPIError):
        return False
    original = error.orig
    sqlstate = getattr(original, 'sqlstate', None) or getattr(
        original,
        'pgcode',
        None,
    )
    if sqlstate in RETRYABLE_SQLSTATES:
        return True
    message = str(original).lower()
    return any(marker in message for marker in RETRYABLE_DB_MESSAGES)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        f'Конфликт транзакции брони, попытка {retry_state.attempt_number}: '
        f'{retry_state.outcome.exception()}',
    )


async def run_admission(operation: Callable[[], Awaitable[T]]) -> T:
    """Выполняет транзакцию допуска с ограниченным числом повторов.

    Повторяются только транзиентные ошибки БД; операция сама откатывает
    сессию при сбое. Исчерпание попыток превращается в ConflictError.
    """
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(settings.ADMISSION_MAX_ATTEMPTS),
            wait=wait_exponential(
                multiplier=settings.ADMISSION_RETRY_WAIT,
                max=1,
            ),
            retry=retry_if_exception(is_retryable_error),
            before_sleep=_log_retry,
        ):
            with attempt:
                return await operation()
    except RetryError as e:
        logger.error(
            f'Транзакция брони не прошла за '
            f'{settings.ADMISSION_MAX_ATTEMPTS} попыток',
        )
        raise ConflictError(
            'Бронирование временно недоступно из-за конкурентных изменений, '
            'повторите запрос',
        ) from e.last_attempt.exception()


class AvailabilityService:
    """Сервис расчёта свободных мест и допуска броней."""

    @staticmethod
    async def get_restaurant(
        session: AsyncSession,
        restaurant_id: UUID,
        *,
        for_update: bool = False,
    ) -> Restaurant:
        """Возвращает активный ресторан или бросает NotFoundError.

        Args:
            session: Асинхронная сессия базы данных
            restaurant_id: UUID ресторана
            for_update: Заблокировать строку ресторана до конца транзакции

        """
        stmt = select(Restaurant).where(
            Restaurant.id == restaurant_id,
            Restaurant.is_active.is_(True),
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(
                populate_existing=True,
            )
        result = await session.execute(stmt)
        restaurant = result.scalar_one_or_none()
        if restaurant is None:
            raise NotFoundError('Ресторан не найден')
        return restaurant

    @staticmethod
    async def list_overlapping(
        session: AsyncSession,
        restaurant_id: UUID,
        window: TimeWindow,
        exclude_booking_id: Optional[UUID] = None,
    ) -> Sequence[Row]:
        """Возвращает (id, guests) действующих броней, пересекающих окно."""
        stmt = select(Booking.id, Booking.guests).where(
            Booking.restaurant_id == restaurant_id,
            Booking.status != BookingStatus.CANCELED,
            Booking.reservation_time < window.end,
            Booking.ends_at > window.start,
        )
        if exclude_booking_id is not None:
            stmt = stmt.where(Booking.id != exclude_booking_id)
        result = await session.execute(stmt)
        return result.all()

    @classmethod
    async def check_availability(
        cls,
        session: AsyncSession,
        restaurant_id: UUID,
        candidate_time: datetime | str,
        candidate_duration: ReservationDuration | str,
        exclude_booking_id: Optional[UUID] = None,
        *,
        for_update: bool = False,
    ) -> SeatAvailability:
        """Считает занятость окна по актуальным данным хранилища."""
        window = TimeWindow.from_duration(candidate_time, candidate_duration)
        restaurant = await cls.get_restaurant(
            session,
            restaurant_id,
            for_update=for_update,
        )
        overlapping = await cls.list_overlapping(
            session,
            restaurant_id,
            window,
            exclude_booking_id,
        )
        return SeatAvailability(
            total_seats=restaurant.total_seats,
            occupied_seats=sum(row.guests for row in overlapping),
        )

    @classmethod
    async def compute_available_seats(
        cls,
        session: AsyncSession,
        restaurant_id: UUID,
        candidate_time: datetime | str,
        candidate_duration: ReservationDuration | str,
        exclude_booking_id: Optional[UUID] = None,
    ) -> int:
        """Возвращает количество свободных мест на окно (не меньше нуля).

        Результат носит справочный характер: к моменту отправки брони места
        могут быть заняты, окончательную проверку делает admit_reservation.

        Args:
            session: Асинхронная сессия базы данных
            restaurant_id: UUID ресторана
            candidate_time: Начало окна (datetime или ISO-8601)
            candidate_duration: Токен длительности: 15min, 30min, 45min, 1h
            exclude_booking_id: Бронь, которая не учитывается (при изменении)

        Raises:
            NotFoundError: Ресторан отсутствует или удалён
            InvalidArgumentError: Некорректное время или длительность

        """
        availability = await cls.check_availability(
            session,
            restaurant_id,
            candidate_time,
            candidate_duration,
            exclude_booking_id,
        )
        return availability.available_seats

    @classmethod
    async def admit_reservation(
        cls,
        session: AsyncSession,
        restaurant_id: UUID,
        candidate_time: datetime | str,
        candidate_duration: ReservationDuration | str,
        requested_guests: int,
        exclude_booking_id: Optional[UUID] = None,
    ) -> SeatAvailability:
        """Допускает бронь, если после неё вместимость не будет превышена.

        Сумма гостей пересчитывается заново под блокировкой строки
        ресторана; вызывающий код сохраняет бронь в той же транзакции.
        Бронь exclude_booking_id исключается из суммы целиком.

        Raises:
            NotFoundError: Ресторан отсутствует или удалён
            InvalidArgumentError: Некорректные время, длительность, гости
            CapacityExceededError: Мест недостаточно

        """
        guests = validate_guests(requested_guests)
        availability = await cls.check_availability(
            session,
            restaurant_id,
            candidate_time,
            candidate_duration,
            exclude_booking_id,
            for_update=True,
        )
        if not availability.can_admit(guests):
            logger.warning(
                f'Отказ в брони ресторана {restaurant_id} на '
                f'{candidate_time} ({candidate_duration}): запрошено '
                f'{guests}, доступно {availability.available_seats}',
            )
            raise CapacityExceededError(availability.available_seats, guests)
        return availability

    @staticmethod
    def peak_occupancy(bookings: Iterable[Occupying]) -> int:
        """Максимум одновременно занятых мест по набору броней."""
        events = []
        for booking in bookings:
            start = ensure_utc(booking.reservation_time)
            end = ensure_utc(booking.ends_at)
            events.append((start, 1, booking.guests))
            events.append((end, 0, -booking.guests))
        # В один момент освобождение учитывается раньше занятия
        peak = current = 0
        for _, _, delta in sorted(events, key=lambda event: event[:2]):
            current += delta
            peak = max(peak, current)
        return peak

    @classmethod
    async def validate_capacity_change(
        cls,
        session: AsyncSession,
        restaurant: Restaurant,
        new_total_seats: int,
        now: Optional[datetime] = None,
    ) -> None:
        """Запрещает уменьшать вместимость ниже пика будущих броней."""
        if new_total_seats >= restaurant.total_seats:
            return
        now = ensure_utc(now or datetime.now(timezone.utc))
        stmt = select(Booking).where(
            Booking.restaurant_id == restaurant.id,
            Booking.status != BookingStatus.CANCELED,
            Booking.ends_at > now,
        )
        result = await session.execute(stmt)
        peak = cls.peak_occupancy(result.scalars().all())
        if peak > new_total_seats:
            raise PolicyViolationError(
                f'Нельзя уменьшить вместимость до {new_total_seats}: '
                f'уже забронировано до {peak} мест одновременно',
            )
