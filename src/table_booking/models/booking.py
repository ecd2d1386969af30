import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from table_booking.core.db import Base
from table_booking.utils.enums import BookingStatus, ReservationDuration

if TYPE_CHECKING:
    from table_booking.models import Restaurant


class Booking(Base):
    """Таблица бронирований мест в ресторане.

    Бронь занимает полуинтервал [reservation_time, ends_at). ends_at
    хранится явно, чтобы поиск пересечений был одним диапазонным условием.
    """

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('restaurant.id', ondelete='CASCADE'),
        nullable=False,
    )
    reservation_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    ends_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    duration: Mapped[ReservationDuration] = mapped_column(
        Enum(ReservationDuration, name='reservation_duration'),
        nullable=False,
    )
    guests: Mapped[int] = mapped_column(Integer, nullable=False)
    user_name: Mapped[str] = mapped_column(String(128), nullable=False)
    user_email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        index=True,
    )
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, name='booking_status'),
        nullable=False,
        default=BookingStatus.CONFIRMED,
        server_default=BookingStatus.CONFIRMED.name,
    )

    restaurant: Mapped['Restaurant'] = relationship(
        back_populates='bookings',
        lazy='selectin',
    )

    __table_args__ = (
        CheckConstraint('guests > 0', name='ck_booking_guests_positive'),
        CheckConstraint(
            'reservation_time < ends_at',
            name='ck_booking_interval',
        ),
        Index(
            'ix_booking_restaurant_window',
            'restaurant_id',
            'reservation_time',
            'ends_at',
        ),
    )
