from typing import TYPE_CHECKING, List

from fastapi_users.db import SQLAlchemyBaseUserTableUUID
from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from table_booking.core.db import Base
from table_booking.utils.enums import UserRole

if TYPE_CHECKING:
    from table_booking.models import Restaurant


class User(SQLAlchemyBaseUserTableUUID, Base):
    """Расширенная таблица пользователей от FastAPI Users."""

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name='user_role'),
        nullable=False,
        default=UserRole.USER,
        server_default=UserRole.USER.value,
    )

    restaurants: Mapped[List['Restaurant']] = relationship(
        back_populates='owner',
        lazy='selectin',
    )
