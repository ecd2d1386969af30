from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from loguru import logger

from table_booking.core.auth import CurrentUser, ensure_owner_or_admin
from table_booking.core.db import DbSession
from table_booking.core.dependencies import Cache
from table_booking.core.exceptions import BookingServiceError
from table_booking.repositories.booking import booking_repository
from table_booking.repositories.restaurant import restaurant_repository
from table_booking.schemas.booking import BookingInfo
from table_booking.schemas.common import ErrorResponse
from table_booking.schemas.restaurant import (
    RestaurantCreate,
    RestaurantInfo,
    RestaurantUpdate,
)
from table_booking.services.availability_service import AvailabilityService
from table_booking.utils.http import as_http_exception, internal_server_error
from table_booking.utils.logging_decorator import event_logger

router = APIRouter(prefix='/restaurants', tags=['Рестораны'])

OWNER_RESPONSES = {
    status.HTTP_401_UNAUTHORIZED: {'model': ErrorResponse},
    status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
    status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
    status.HTTP_409_CONFLICT: {'model': ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
}


@router.get(
    '/',
    response_model=list[RestaurantInfo],
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_all_restaurants(
    session: DbSession,
    cache: Cache,
) -> list[RestaurantInfo]:
    """Публичный список действующих ресторанов.

    Список кешируется в Redis и сбрасывается при любом изменении
    профиля ресторана.
    """
    cached = await cache.get_restaurants()
    if cached is not None:
        return cached
    try:
        restaurants = await restaurant_repository.get_multi_active(session)
    except Exception as e:
        logger.error(f'Ошибка при получении списка ресторанов: {str(e)}')
        raise internal_server_error()
    payload = [
        RestaurantInfo.model_validate(restaurant).model_dump(mode='json')
        for restaurant in restaurants
    ]
    await cache.set_restaurants(payload)
    return payload


@router.get(
    '/my-restaurants',
    response_model=list[RestaurantInfo],
    responses={
        status.HTTP_401_UNAUTHORIZED: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_my_restaurants(
    session: DbSession,
    current_user: CurrentUser,
) -> list[RestaurantInfo]:
    """Рестораны, зарегистрированные текущим пользователем."""
    try:
        return await restaurant_repository.get_by_owner(
            session,
            current_user.id,
        )
    except Exception as e:
        logger.error(
            f'Ошибка при получении ресторанов пользователя '
            f'{current_user.id}: {str(e)}',
        )
        raise internal_server_error()


@router.post(
    '/register',
    response_model=RestaurantInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_401_UNAUTHORIZED: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создана', 'Restaurant')
async def register_restaurant(
    restaurant_data: RestaurantCreate,
    session: DbSession,
    current_user: CurrentUser,
    cache: Cache,
) -> RestaurantInfo:
    """Регистрирует ресторан, владельцем становится текущий пользователь."""
    try:
        restaurant = await restaurant_repository.create_with_owner(
            session,
            restaurant_data,
            current_user,
        )
    except Exception as e:
        logger.error(f'Ошибка при регистрации ресторана: {str(e)}')
        raise internal_server_error()
    await cache.clear_restaurants_cache()
    return restaurant


@router.get(
    '/{restaurant_id}',
    response_model=RestaurantInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_restaurant_by_id(
    restaurant_id: UUID,
    session: DbSession,
) -> RestaurantInfo:
    """Получает действующий ресторан по идентификатору."""
    try:
        return await AvailabilityService.get_restaurant(session, restaurant_id)
    except BookingServiceError as e:
        logger.warning(f'Ресторан {restaurant_id}: {e.message}')
        raise as_http_exception(e)
    except Exception as e:
        logger.error(
            f'Ошибка при получении ресторана {restaurant_id}: {str(e)}',
        )
        raise internal_server_error()


@router.patch(
    '/{restaurant_id}',
    response_model=RestaurantInfo,
    responses=OWNER_RESPONSES,
)
@event_logger('Обновлена', 'Restaurant')
async def update_restaurant(
    restaurant_id: UUID,
    update_data: RestaurantUpdate,
    session: DbSession,
    current_user: CurrentUser,
    cache: Cache,
) -> RestaurantInfo:
    """Обновляет профиль ресторана владельцем или администратором.

    Raises:
        HTTPException: 403 если пользователь не владелец и не админ
        HTTPException: 409 если новая вместимость меньше пиковой
            занятости предстоящих броней

    """
    try:
        restaurant = await AvailabilityService.get_restaurant(
            session,
            restaurant_id,
        )
        ensure_owner_or_admin(current_user, restaurant.owner_id)
        restaurant = await restaurant_repository.update_with_capacity_check(
            session,
            restaurant_id,
            update_data,
        )
    except BookingServiceError as e:
        logger.warning(f'Ресторан {restaurant_id} не изменён: {e.message}')
        raise as_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            f'Ошибка при обновлении ресторана {restaurant_id}: {str(e)}',
        )
        raise internal_server_error()
    await cache.clear_restaurants_cache()
    return restaurant


@router.delete(
    '/{restaurant_id}',
    response_model=RestaurantInfo,
    responses=OWNER_RESPONSES,
)
@event_logger('Удалена', 'Restaurant')
async def delete_restaurant(
    restaurant_id: UUID,
    session: DbSession,
    current_user: CurrentUser,
    cache: Cache,
) -> RestaurantInfo:
    """Удаляет ресторан, если у него нет предстоящих бронирований."""
    try:
        restaurant = await AvailabilityService.get_restaurant(
            session,
            restaurant_id,
        )
        ensure_owner_or_admin(current_user, restaurant.owner_id)
        restaurant = await restaurant_repository.delete_with_policy(
            session,
            restaurant_id,
        )
    except BookingServiceError as e:
        logger.warning(f'Ресторан {restaurant_id} не удалён: {e.message}')
        raise as_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            f'Ошибка при удалении ресторана {restaurant_id}: {str(e)}',
        )
        raise internal_server_error()
    await cache.clear_restaurants_cache()
    return restaurant


@router.get(
    '/{restaurant_id}/bookings',
    response_model=list[BookingInfo],
    responses=OWNER_RESPONSES,
)
async def get_restaurant_bookings(
    restaurant_id: UUID,
    session: DbSession,
    current_user: CurrentUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[BookingInfo]:
    """Действующие бронирования ресторана для владельца."""
    try:
        restaurant = await AvailabilityService.get_restaurant(
            session,
            restaurant_id,
        )
        ensure_owner_or_admin(current_user, restaurant.owner_id)
        return await booking_repository.get_multi_filtered(
            session,
            restaurant_id=restaurant_id,
            skip=skip,
            limit=limit,
        )
    except BookingServiceError as e:
        logger.warning(f'Брони ресторана {restaurant_id}: {e.message}')
        raise as_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            f'Ошибка при получении броней ресторана {restaurant_id}: '
            f'{str(e)}',
        )
        raise internal_server_error()
