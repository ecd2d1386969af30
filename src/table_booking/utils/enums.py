from datetime import timedelta
from enum import Enum

from table_booking.core.constants import DURATION_MINUTES
from table_booking.core.exceptions import InvalidArgumentError


class UserRole(str, Enum):
    """Enum класс для ролей пользователей."""

    USER = 'USER'
    ADMIN = 'ADMIN'


class BookingStatus(str, Enum):
    """Enum класс для статусов бронирований."""

    CONFIRMED = 'CONFIRMED'
    CANCELED = 'CANCELED'


class ReservationDuration(str, Enum):
    """Допустимые длительности брони в виде токенов API."""

    MIN_15 = '15min'
    MIN_30 = '30min'
    MIN_45 = '45min'
    HOUR_1 = '1h'

    @property
    def minutes(self) -> int:
        return DURATION_MINUTES[self.value]

    @property
    def span(self) -> timedelta:
        return timedelta(minutes=self.minutes)

    @classmethod
    def parse(
        cls,
        value: 'ReservationDuration | str',
    ) -> 'ReservationDuration':
        """Длительность по токену API.

        Raises:
            InvalidArgumentError: Токен не входит в допустимый набор

        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ', '.join(item.value for item in cls)
            raise InvalidArgumentError(
                f'Недопустимая длительность {value!r}, '
                f'допустимые значения: {allowed}',
                field='duration',
            )


class Weekday(str, Enum):
    """Дни недели для графика работы ресторана."""

    MONDAY = 'monday'
    TUESDAY = 'tuesday'
    WEDNESDAY = 'wednesday'
    THURSDAY = 'thursday'
    FRIDAY = 'friday'
    SATURDAY = 'saturday'
    SUNDAY = 'sunday'
