from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import (
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)
from pydantic.types import StringConstraints

from table_booking.schemas.common import CamelModel, reject_explicit_nulls
from table_booking.utils.dates import ensure_utc
from table_booking.utils.enums import BookingStatus, ReservationDuration

GuestsField = Annotated[int, Field(ge=1)]

UserNameConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=1,
    max_length=128,
)


class BookingCreate(CamelModel):
    """Схема для создания нового бронирования."""

    restaurant_id: UUID
    reservation_time: datetime
    duration: ReservationDuration
    guests: GuestsField
    user_name: Annotated[str, UserNameConstraint]
    user_email: EmailStr

    @field_validator('reservation_time', mode='after')
    @classmethod
    def normalize_time(cls, value: datetime) -> datetime:
        """Приводит время начала брони к UTC."""
        return ensure_utc(value)


class BookingUpdate(CamelModel):
    """Схема для изменения существующего бронирования."""

    reservation_time: Optional[datetime] = None
    duration: Optional[ReservationDuration] = None
    guests: Optional[GuestsField] = None

    @field_validator('reservation_time', mode='after')
    @classmethod
    def normalize_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Приводит время начала брони к UTC."""
        if value is None:
            return None
        return ensure_utc(value)

    @model_validator(mode='after')
    def validate_not_empty(self) -> 'BookingUpdate':
        """Проверяет, что передано хотя бы одно поле."""
        if not self.model_fields_set:
            raise ValueError('Нужно указать время, длительность или гостей')
        reject_explicit_nulls(self)
        return self


class BookingInfo(CamelModel):
    """Полная схема бронирования."""

    id: UUID
    restaurant_id: UUID
    reservation_time: datetime
    ends_at: datetime
    duration: ReservationDuration
    guests: int
    user_name: str
    user_email: str
    status: BookingStatus
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator(
        'reservation_time',
        'ends_at',
        'created_at',
        'updated_at',
        mode='after',
    )
    @classmethod
    def attach_utc(cls, value: datetime) -> datetime:
        """SQLite возвращает наивное время; в ответе оно всегда в UTC."""
        return ensure_utc(value)


class AvailabilityInfo(CamelModel):
    """Остаток мест на выбранное окно."""

    restaurant_id: UUID
    reservation_time: datetime
    duration: ReservationDuration
    available_seats: int
    total_seats: int
