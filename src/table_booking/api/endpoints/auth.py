from fastapi import APIRouter, HTTPException, status
from loguru import logger

from table_booking.core.auth import create_access_token, verify_password
from table_booking.core.db import DbSession
from table_booking.repositories.user import user_repository
from table_booking.schemas.auth import AuthData, AuthToken
from table_booking.schemas.common import ErrorResponse
from table_booking.utils.http import build_error

router = APIRouter(prefix='/auth', tags=['Аутентификация'])


@router.post(
    '/login',
    response_model=AuthToken,
    responses={
        status.HTTP_401_UNAUTHORIZED: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
    },
)
async def login(
    session: DbSession,
    login_data: AuthData,
) -> AuthToken:
    """Аутентификация пользователя и получение JWT токена."""
    user = await user_repository.get_by_email(session, login_data.email)

    if (
        not user
        or not user.is_active
        or not verify_password(login_data.password, user.hashed_password)
    ):
        logger.warning(f'Неудачная попытка входа: {login_data.email}')
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=build_error(
                'Неверный email или пароль',
                status.HTTP_401_UNAUTHORIZED,
            ),
        )

    if not user.is_verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=build_error(
                'Подтвердите почту по ссылке из письма',
                status.HTTP_403_FORBIDDEN,
            ),
        )

    return AuthToken(access_token=create_access_token(user.id, user.email))
