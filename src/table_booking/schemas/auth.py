from pydantic import EmailStr

from table_booking.schemas.common import CamelModel


class AuthToken(CamelModel):
    """Схема токена аутентификации."""

    access_token: str
    token_type: str = 'bearer'


class AuthData(CamelModel):
    """Схема для запроса логина."""

    email: EmailStr
    password: str


class VerificationResult(CamelModel):
    """Результат подтверждения почты."""

    verified: bool
    email: str
