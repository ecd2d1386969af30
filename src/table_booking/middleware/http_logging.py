import time
import uuid
from typing import Callable

from fastapi import Request, Response
from jose import JWTError, jwt
from loguru import logger

from table_booking.core.constants import (
    HTTP_LOG_TEMPLATE,
    MS_IN_SECOND,
    NOISE_PATHS,
)

ANONYMOUS = ('-', 'GUEST')


def _get_request_id(request: Request) -> str:
    """Возвращает X-Request-ID из заголовков или создаёт новый UUID."""
    return request.headers.get('X-Request-ID') or str(uuid.uuid4())


def _get_user_data(request: Request) -> tuple[str, str]:
    """Извлекает (user_id, email) из bearer-токена без проверки подписи.

    Бронирование доступно без входа, поэтому запросы без токена
    логируются от имени гостя.
    """
    auth = request.headers.get('authorization', '')
    scheme, _, token = auth.partition(' ')
    if scheme.lower() != 'bearer' or not token:
        return ANONYMOUS
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return ANONYMOUS
    return str(claims.get('sub', '-')), str(claims.get('email', 'GUEST'))


def _get_client_ip(request: Request) -> str:
    """Возвращает IP-адрес клиента."""
    xff = request.headers.get('x-forwarded-for')
    if xff:
        return xff.split(',')[0].strip()
    return request.client.host if request.client else '-'


def _choose_level(status: int) -> str:
    """Возвращает уровень лога в зависимости от кода ответа."""
    if status >= 500:
        return 'ERROR'
    if status >= 400:
        return 'WARNING'
    return 'INFO'


async def logging_middleware(
    request: Request,
    call_next: Callable,
) -> Response:
    """Middleware для логирования HTTP-запросов.

    Весь лог обработки запроса получает контекст request_id, user_id и
    username. Отказы в брони (409) и конфликты (503) попадают в лог с
    уровнями WARNING и ERROR. Пути из NOISE_PATHS не логируются, кроме
    ошибок.
    """
    start = time.perf_counter()
    request_id = _get_request_id(request)
    user_id, username = _get_user_data(request)
    method = request.method
    path = request.url.path

    status = 500
    response: Response | None = None
    with logger.contextualize(
        request_id=request_id,
        user_id=user_id,
        username=username,
    ):
        try:
            response = await call_next(request)
            status = response.status_code
        except Exception:
            logger.opt(exception=True).error(
                f'Необработанное исключение: {method} {path}',
            )
            raise
        finally:
            level = _choose_level(status)
            if level == 'ERROR' or path not in NOISE_PATHS:
                logger.log(
                    level,
                    HTTP_LOG_TEMPLATE,
                    method=method,
                    path=path,
                    status=status,
                    ms=(time.perf_counter() - start) * MS_IN_SECOND,
                    ip=_get_client_ip(request),
                    ua=request.headers.get('user-agent', '-'),
                )

    response.headers.setdefault('X-Request-ID', request_id)
    return response
