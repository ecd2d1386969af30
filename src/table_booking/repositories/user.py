from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from table_booking.core.auth import get_password_hash
from table_booking.core.exceptions import InvalidArgumentError
from table_booking.models.user import User
from table_booking.repositories.base import CRUDBase
from table_booking.schemas.user import UserCreate, UserInfo
from table_booking.utils.enums import UserRole


class UserRepository(CRUDBase[User, UserCreate, UserInfo]):
    """Репозиторий для операций с пользователями."""

    def __init__(self) -> None:
        """Инициализация репозитория пользователей."""
        super().__init__(User)

    async def create(
        self,
        session: AsyncSession,
        obj_in: UserCreate,
        *,
        role: UserRole = UserRole.USER,
        is_verified: bool = False,
    ) -> User:
        """Создание пользователя с хешированием пароля."""
        if await self.get_by_email(session, obj_in.email):
            raise InvalidArgumentError(
                'Пользователь с таким email уже существует',
                field='email',
            )
        db_obj = self.model(
            **obj_in.model_dump(exclude={'password'}),
            hashed_password=get_password_hash(obj_in.password),
            role=role,
            is_verified=is_verified,
        )
        try:
            session.add(db_obj)
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise InvalidArgumentError(
                'Пользователь с таким email уже существует',
                field='email',
            )
        await session.refresh(db_obj)
        return db_obj

    async def get_multi(
        self,
        session: AsyncSession,
        skip: int = 0,
        limit: int = 100,
    ) -> List[User]:
        """Получение списка пользователей."""
        return await self.get(
            session,
            many=True,
            order_by=(User.created_at,),
            offset=skip,
            limit=limit,
        )

    async def get_by_email(
        self,
        session: AsyncSession,
        email: str,
    ) -> Optional[User]:
        """Получает пользователя по email."""
        return await self.get(session, email=email.lower())

    async def mark_verified(
        self,
        session: AsyncSession,
        user: User,
    ) -> User:
        """Отмечает почту пользователя подтверждённой."""
        if not user.is_verified:
            user.is_verified = True
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return user


user_repository = UserRepository()
