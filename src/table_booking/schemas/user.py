from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import ConfigDict, EmailStr, field_validator
from pydantic.types import StringConstraints

from table_booking.schemas.common import CamelModel
from table_booking.utils.enums import UserRole
from table_booking.utils.validators import validate_password_strength

NameConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=1,
    max_length=128,
)


class UserCreate(CamelModel):
    """Схема регистрации пользователя."""

    email: EmailStr
    name: Annotated[str, NameConstraint]
    password: str

    @field_validator('password', mode='before')
    @classmethod
    def validate_password(cls, value: str) -> str:
        """Проверяет, что пароль соответствует требованиям."""
        return validate_password_strength(value)

    @field_validator('email', mode='after')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        """Приводит email к нижнему регистру."""
        return value.lower()


class UserInfo(CamelModel):
    """Публичная схема пользователя."""

    id: UUID
    email: str
    name: str
    role: UserRole
    is_verified: bool
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
