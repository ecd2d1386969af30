from typing import Any

from fastapi import HTTPException, status

from table_booking.core.constants import CONFLICT_RETRY_AFTER
from table_booking.core.exceptions import BookingServiceError, ConflictError


def build_error(detail: Any, code: int, **extra: Any) -> dict[str, Any]:
    """Формирует унифицированный ответ об ошибке для API."""
    error = {'code': code, 'detail': str(detail) if detail is not None else ''}
    error.update(
        {key: value for key, value in extra.items() if value is not None},
    )
    return error


def as_http_exception(exc: BookingServiceError) -> HTTPException:
    """Переводит доменное исключение в HTTPException с единым телом."""
    headers = None
    if isinstance(exc, ConflictError):
        headers = {'Retry-After': str(CONFLICT_RETRY_AFTER)}
    return HTTPException(
        status_code=exc.status_code,
        detail=build_error(exc.message, exc.status_code, **exc.extra()),
        headers=headers,
    )


def internal_server_error(
    detail: str = 'Внутренняя ошибка сервера',
) -> HTTPException:
    """HTTPException 500 с унифицированным телом ответа."""
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=build_error(detail, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )
