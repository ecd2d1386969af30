from .base import CRUDBase
from .booking import BookingRepository, booking_repository
from .restaurant import RestaurantRepository, restaurant_repository
from .user import UserRepository, user_repository

__all__ = [
    'CRUDBase',
    'BookingRepository',
    'booking_repository',
    'RestaurantRepository',
    'restaurant_repository',
    'UserRepository',
    'user_repository',
]
