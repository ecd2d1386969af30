"""Доменные исключения сервиса бронирования.

Каждое исключение знает HTTP-статус, в который его переводит API, и
дополнительные поля ответа (например, остаток мест при отказе в брони).
"""

from typing import Any, Optional

from fastapi import status


class BookingServiceError(Exception):
    """Базовое исключение сервиса бронирования."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def extra(self) -> dict[str, Any]:
        """Дополнительные поля для тела ответа об ошибке."""
        return {}


class NotFoundError(BookingServiceError):
    """Ресторан или бронирование не найдены."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidArgumentError(BookingServiceError, ValueError):
    """Некорректное время, длительность или количество гостей."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field

    def extra(self) -> dict[str, Any]:
        return {'field': self.field} if self.field else {}


class CapacityExceededError(BookingServiceError):
    """Мест на выбранное окно недостаточно."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, available_seats: int, requested_guests: int) -> None:
        super().__init__(
            f'Недостаточно мест: запрошено {requested_guests}, '
            f'доступно {available_seats}',
        )
        self.available_seats = available_seats
        self.requested_guests = requested_guests

    def extra(self) -> dict[str, Any]:
        return {'availableSeats': self.available_seats}


class ConflictError(BookingServiceError):
    """Конкурентные изменения не удалось разрешить за отведённые попытки."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class PolicyViolationError(BookingServiceError):
    """Операция запрещена текущим состоянием бронирований ресторана."""

    status_code = status.HTTP_409_CONFLICT
