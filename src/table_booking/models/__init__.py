from .booking import Booking
from .restaurant import Restaurant
from .user import User

__all__ = [
    'User',
    'Restaurant',
    'Booking',
]
