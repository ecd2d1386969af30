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

from table_booking.core.constants import (
    MAX_TOTAL_SEATS,
    PHONE_PATTERN,
    RESTAURANT_NAME_MAX_LENGTH,
)
from table_booking.schemas.common import CamelModel, reject_explicit_nulls
from table_booking.utils.enums import Weekday
from table_booking.utils.validators import validate_phone

NameConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=1,
    max_length=RESTAURANT_NAME_MAX_LENGTH,
)

PhoneConstraint = StringConstraints(
    strip_whitespace=True,
    pattern=PHONE_PATTERN,
)

SeatsField = Annotated[int, Field(ge=1, le=MAX_TOTAL_SEATS)]

WorkingHours = dict[Weekday, Annotated[str, StringConstraints(max_length=64)]]


def clean_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError('Описание должно быть строкой')
    cleaned = value.strip()
    if not cleaned:
        raise ValueError('Описание ресторана не может быть пустым')
    return cleaned


class RestaurantCreate(CamelModel):
    """Схема для регистрации нового ресторана."""

    name: Annotated[str, NameConstraint]
    description: str
    contact: Annotated[str, PhoneConstraint]
    email: EmailStr
    total_seats: SeatsField
    working_hours: WorkingHours = Field(default_factory=dict)

    normalize_description = field_validator('description', mode='before')(
        clean_description,
    )

    @field_validator('contact', mode='after')
    @classmethod
    def validate_contact(cls, value: str) -> str:
        """Проверяет корректность формата контактного телефона."""
        return validate_phone(value)


class RestaurantUpdate(CamelModel):
    """Схема для обновления профиля ресторана."""

    name: Optional[Annotated[str, NameConstraint]] = None
    description: Optional[str] = None
    contact: Optional[Annotated[str, PhoneConstraint]] = None
    email: Optional[EmailStr] = None
    total_seats: Optional[SeatsField] = None
    working_hours: Optional[WorkingHours] = None

    normalize_description = field_validator('description', mode='before')(
        clean_description,
    )

    @model_validator(mode='after')
    def validate_no_nulls(self) -> 'RestaurantUpdate':
        """Поля профиля нельзя сбросить в null."""
        reject_explicit_nulls(self)
        return self


class RestaurantInfo(CamelModel):
    """Полная схема ресторана."""

    id: UUID
    owner_id: UUID
    name: str
    description: str
    contact: str
    email: str
    total_seats: int
    working_hours: dict[str, str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
