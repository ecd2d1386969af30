from datetime import datetime, timedelta, timezone

from table_booking.core.auth import create_access_token
from table_booking.models import Booking, Restaurant, User
from table_booking.repositories.user import user_repository
from table_booking.schemas.user import UserCreate
from table_booking.utils.enums import (
    BookingStatus,
    ReservationDuration,
    UserRole,
)

PASSWORD = 'Str0ng!pass'

# Момент в будущем, чтобы брони не считались прошедшими
BASE_TIME = (datetime.now(timezone.utc) + timedelta(days=30)).replace(
    hour=18,
    minute=0,
    second=0,
    microsecond=0,
)


def at(minutes: int) -> datetime:
    """BASE_TIME со сдвигом в минутах."""
    return BASE_TIME + timedelta(minutes=minutes)


async def make_user(
    session,
    email: str = 'owner@example.com',
    *,
    role: UserRole = UserRole.USER,
    is_verified: bool = True,
) -> User:
    return await user_repository.create(
        session,
        UserCreate(email=email, name='Test User', password=PASSWORD),
        role=role,
        is_verified=is_verified,
    )


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.email)
    return {'Authorization': f'Bearer {token}'}


async def make_restaurant(
    session,
    owner: User,
    total_seats: int = 10,
    **overrides: object,
) -> Restaurant:
    data: dict = {
        'owner_id': owner.id,
        'name': 'Test Restaurant',
        'description': 'Cozy place',
        'contact': '+12345678901',
        'email': 'restaurant@example.com',
        'total_seats': total_seats,
        'working_hours': {'monday': '10:00-22:00'},
    }
    data.update(overrides)
    restaurant = Restaurant(**data)
    session.add(restaurant)
    await session.commit()
    await session.refresh(restaurant)
    return restaurant


async def make_booking(
    session,
    restaurant: Restaurant,
    start: datetime,
    duration: ReservationDuration = ReservationDuration.HOUR_1,
    guests: int = 2,
    status: BookingStatus = BookingStatus.CONFIRMED,
    email: str = 'guest@example.com',
) -> Booking:
    booking = Booking(
        restaurant_id=restaurant.id,
        reservation_time=start,
        ends_at=start + duration.span,
        duration=duration,
        guests=guests,
        user_name='Guest',
        user_email=email,
        status=status,
        is_active=status != BookingStatus.CANCELED,
    )
    session.add(booking)
    await session.commit()
    await session.refresh(booking)
    return booking
