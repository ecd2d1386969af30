from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from table_booking.core.constants import VALIDATION_ERROR_STATUS


def _format_error(code: int, detail: Any) -> dict[str, Any]:
    """Форматирует сообщение об ошибке в единый вид.

    Дополнительные ключи словаря (availableSeats, field) сохраняются.
    """
    if isinstance(detail, dict):
        content = dict(detail)
        content['code'] = detail.get('code', code)
        message = detail.get('detail') or detail.get('message')
        content['detail'] = str(message) if message else ''
        content.pop('message', None)
        return content
    if isinstance(detail, list):
        detail = '; '.join(str(item) for item in detail)
    return {'code': code, 'detail': str(detail) if detail else ''}


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Перехватывает ошибки валидации и возвращает понятные сообщения."""
    messages = []
    for error in exc.errors():
        location = '.'.join(
            str(part) for part in error.get('loc', ()) if part != 'body'
        )
        message = error['msg'].replace('Value error, ', '')
        messages.append(f'{location}: {message}' if location else message)
    message = '; '.join(messages) if messages else 'Ошибка валидации данных'
    return JSONResponse(
        status_code=VALIDATION_ERROR_STATUS,
        content=_format_error(VALIDATION_ERROR_STATUS, message),
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Унифицирует формат ответа для HTTP исключений."""
    content = _format_error(exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, 'headers', None),
    )
