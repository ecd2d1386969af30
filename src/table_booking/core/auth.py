from datetime import datetime, timedelta, timezone
from typing import Annotated, Awaitable, Callable, List, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from loguru import logger
from passlib.context import CryptContext
from sqlalchemy import select

from table_booking.core.config import settings
from table_booking.core.constants import VERIFY_TOKEN_PURPOSE
from table_booking.core.db import DbSession
from table_booking.core.exceptions import InvalidArgumentError
from table_booking.models.user import User
from table_booking.utils.enums import UserRole

security = HTTPBearer(auto_error=False)

pwd_context = CryptContext(schemes=['bcrypt'], deprecated='auto')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Хеширование пароля."""
    return pwd_context.hash(password)


def _encode(claims: dict, expires_in: timedelta) -> str:
    to_encode = dict(claims, exp=datetime.now(timezone.utc) + expires_in)
    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def create_access_token(user_id: UUID, email: str) -> str:
    """Создает JWT токен доступа."""
    return _encode(
        {'sub': str(user_id), 'email': email},
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_verification_token(email: str) -> str:
    """Создает токен для ссылки подтверждения почты."""
    return _encode(
        {'sub': email, 'purpose': VERIFY_TOKEN_PURPOSE},
        timedelta(hours=settings.VERIFICATION_TOKEN_EXPIRE_HOURS),
    )


def decode_verification_token(token: str) -> str:
    """Возвращает email из токена подтверждения.

    Raises:
        InvalidArgumentError: Токен просрочен, подделан или не для
            подтверждения почты

    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except JWTError as e:
        logger.warning(f'Недействительный токен подтверждения: {e}')
        raise InvalidArgumentError(
            'Ссылка подтверждения недействительна или устарела',
            field='token',
        ) from e
    email = payload.get('sub')
    if payload.get('purpose') != VERIFY_TOKEN_PURPOSE or not email:
        raise InvalidArgumentError(
            'Ссылка подтверждения недействительна или устарела',
            field='token',
        )
    return email


async def get_current_user(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials],
        Depends(security),
    ],
    session: DbSession,
) -> User:
    """Получение текущего пользователя из JWT токена."""
    if credentials is None:
        logger.info('Отсутствует заголовок Authorization в headers')
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Не авторизован',
        )

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
        user_id = UUID(payload.get('sub') or '')
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Неверные учетные данные',
        )

    stmt = select(User).where(
        User.id == user_id,
        User.is_active.is_(True),
    )
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Пользователь не найден или неактивен',
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def role_checker(
    allowed_roles: List[UserRole],
) -> Callable[..., Awaitable[User]]:
    """Универсальная функция для проверки ролей пользователя."""

    async def checker(current_user: CurrentUser) -> User:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='Недостаточно прав для выполнения операции',
            )
        return current_user

    return checker


def ensure_owner_or_admin(user: User, owner_id: UUID) -> None:
    """Разрешает изменение ресторана только владельцу или админу."""
    if user.role != UserRole.ADMIN and user.id != owner_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Недостаточно прав для выполнения операции',
        )
