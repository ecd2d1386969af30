from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from table_booking.core.auth import get_password_hash
from table_booking.core.config import settings
from table_booking.repositories.user import user_repository
from table_booking.schemas.user import UserCreate
from table_booking.utils.enums import UserRole


async def upsert_admin_if_not_exist(session: AsyncSession) -> None:
    """Проверяет наличие дефолтной учётки. Воссоздаёт при необходимости."""
    admin_user = UserCreate(
        email=settings.ADMIN_EMAIL,
        name=settings.ADMIN_NAME,
        password=settings.ADMIN_PASSWORD,
    )
    existing_user = await user_repository.get_by_email(
        session,
        admin_user.email,
    )

    if existing_user:
        existing_user.name = admin_user.name
        existing_user.hashed_password = get_password_hash(admin_user.password)
        existing_user.role = UserRole.ADMIN
        existing_user.is_active = True
        existing_user.is_verified = True
        await session.commit()
        logger.info(f'Учётная запись администратора {admin_user.email} '
                    'обновлена')
        return

    await user_repository.create(
        session,
        admin_user,
        role=UserRole.ADMIN,
        is_verified=True,
    )
    logger.info(f'Создана учётная запись администратора {admin_user.email}')
