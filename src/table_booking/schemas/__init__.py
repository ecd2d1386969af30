"""Модуль схем Pydantic для валидации и сериализации данных.

Содержит схемы для всех сущностей системы:
- Рестораны (Restaurant)
- Бронирования (Booking) и остаток мест (Availability)
- Пользователи (User)
- Токен аутентификации (Auth)

JSON-поля именуются в camelCase, на вход принимается и snake_case.
"""

from .auth import AuthData, AuthToken, VerificationResult
from .booking import (
    AvailabilityInfo,
    BookingCreate,
    BookingInfo,
    BookingUpdate,
)
from .common import (
    CamelModel,
    CapacityErrorResponse,
    ErrorResponse,
    InvalidArgumentResponse,
)
from .restaurant import RestaurantCreate, RestaurantInfo, RestaurantUpdate
from .user import UserCreate, UserInfo

__all__ = [
    'AuthData',
    'AuthToken',
    'VerificationResult',
    'AvailabilityInfo',
    'BookingCreate',
    'BookingInfo',
    'BookingUpdate',
    'CamelModel',
    'CapacityErrorResponse',
    'ErrorResponse',
    'InvalidArgumentResponse',
    'RestaurantCreate',
    'RestaurantInfo',
    'RestaurantUpdate',
    'UserCreate',
    'UserInfo',
]
