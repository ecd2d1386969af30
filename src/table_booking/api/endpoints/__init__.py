from .auth import router as auth_router
from .booking import router as booking_router
from .healthcheck import router as healthcheck_router
from .restaurant import router as restaurant_router
from .user import router as user_router

__all__ = [
    'auth_router',
    'user_router',
    'restaurant_router',
    'booking_router',
    'healthcheck_router',
]

routers = [
    auth_router,
    user_router,
    restaurant_router,
    booking_router,
    healthcheck_router,
]
