from typing import Annotated, List

from fastapi import APIRouter, Depends, Query, status
from loguru import logger

from table_booking.core.auth import (
    CurrentUser,
    create_verification_token,
    decode_verification_token,
    role_checker,
)
from table_booking.core.db import DbSession
from table_booking.core.exceptions import BookingServiceError, NotFoundError
from table_booking.models.user import User
from table_booking.repositories.user import user_repository
from table_booking.schemas.auth import VerificationResult
from table_booking.schemas.common import ErrorResponse, InvalidArgumentResponse
from table_booking.schemas.user import UserCreate, UserInfo
from table_booking.services.send_email_service import NotificationService
from table_booking.utils.enums import UserRole
from table_booking.utils.http import as_http_exception, internal_server_error

router = APIRouter(prefix='/users', tags=['Пользователи'])


@router.get(
    '/',
    response_model=List[UserInfo],
    responses={
        status.HTTP_401_UNAUTHORIZED: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
    },
)
async def get_all_users(
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker([UserRole.ADMIN]))],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
) -> List[UserInfo]:
    """Получение списка пользователей (только для администратора)."""
    return await user_repository.get_multi(session, skip=skip, limit=limit)


@router.post(
    '/signup',
    response_model=UserInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': InvalidArgumentResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def signup(
    user_data: UserCreate,
    session: DbSession,
) -> UserInfo:
    """Регистрирует пользователя и отправляет ссылку подтверждения почты.

    До подтверждения почты вход в систему недоступен.
    """
    try:
        user = await user_repository.create(session, user_data)
    except BookingServiceError as e:
        logger.warning(f'Регистрация {user_data.email} отклонена: {e.message}')
        raise as_http_exception(e)
    except Exception as e:
        logger.error(f'Ошибка при регистрации пользователя: {str(e)}')
        raise internal_server_error()
    logger.info(f'Зарегистрирован пользователь {user.email}')
    try:
        NotificationService.send_verification_email(
            user,
            create_verification_token(user.email),
        )
    except Exception as e:
        logger.error(f'Ошибка отправки письма подтверждения: {str(e)}')
    return user


@router.get(
    '/verify/{token}',
    response_model=VerificationResult,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': InvalidArgumentResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
    },
)
async def verify_email(token: str, session: DbSession) -> VerificationResult:
    """Подтверждает почту по ссылке из письма."""
    try:
        email = decode_verification_token(token)
        user = await user_repository.get_by_email(session, email)
        if user is None:
            raise NotFoundError('Пользователь не найден')
        user = await user_repository.mark_verified(session, user)
    except BookingServiceError as e:
        logger.warning(f'Подтверждение почты не выполнено: {e.message}')
        raise as_http_exception(e)
    logger.info(f'Почта {user.email} подтверждена')
    return VerificationResult(verified=True, email=user.email)


@router.get(
    '/me',
    response_model=UserInfo,
    responses={status.HTTP_401_UNAUTHORIZED: {'model': ErrorResponse}},
)
async def get_me(current_user: CurrentUser) -> UserInfo:
    """Профиль текущего пользователя."""
    return current_user
