import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import (
    JSON,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from table_booking.core.db import Base

if TYPE_CHECKING:
    from table_booking.models import Booking, User


class Restaurant(Base):
    """Таблица ресторанов с общей вместимостью зала."""

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('user.id', ondelete='CASCADE'),
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    contact: Mapped[str] = mapped_column(String(16), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    # День недели -> свободный текст, только для отображения
    working_hours: Mapped[dict[str, str]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    owner: Mapped['User'] = relationship(
        back_populates='restaurants',
        lazy='selectin',
    )
    bookings: Mapped[List['Booking']] = relationship(
        back_populates='restaurant',
        lazy='noload',
    )

    __table_args__ = (
        CheckConstraint('total_seats > 0', name='ck_restaurant_total_seats'),
    )
