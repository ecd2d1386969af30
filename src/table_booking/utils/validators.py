import re
from typing import Optional

from table_booking.core.constants import (
    ALLOWED_SPECIAL_CHARS,
    PASSWORD_FORBIDS_OTHER_SYMBOLS,
    PASSWORD_MIN_LENGTH,
    PASSWORD_REQUIRES_DIGITS,
    PASSWORD_REQUIRES_LOWER_LETTERS,
    PASSWORD_REQUIRES_SPECIAL_CHARS,
    PASSWORD_REQUIRES_UPPER_LETTERS,
    PHONE_PATTERN,
)

# (включено, шаблон, что требуется)
PASSWORD_RULES = (
    (
        PASSWORD_REQUIRES_UPPER_LETTERS,
        r'[A-Z]',
        'хотя бы одна заглавная буква',
    ),
    (
        PASSWORD_REQUIRES_LOWER_LETTERS,
        r'[a-z]',
        'хотя бы одна строчная буква',
    ),
    (PASSWORD_REQUIRES_DIGITS, r'\d', 'хотя бы одна цифра'),
    (
        PASSWORD_REQUIRES_SPECIAL_CHARS,
        f'[{re.escape(ALLOWED_SPECIAL_CHARS)}]',
        f'хотя бы один спецсимвол из: {ALLOWED_SPECIAL_CHARS}',
    ),
)


def validate_phone(value: Optional[str]) -> Optional[str]:
    """Возвращает читаемое сообщение при некорректном номере телефона."""
    if not (value and value.strip()):
        return None

    if not re.fullmatch(PHONE_PATTERN, value):
        raise ValueError(
            'Введите номер телефона из 10-15 цифр, например: 9991234567',
        )
    return value


def collect_password_errors(password: str) -> list[str]:
    """Возвращает список невыполненных требований к паролю."""
    errors = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f'длина не менее {PASSWORD_MIN_LENGTH} символов')
    errors.extend(
        requirement
        for enabled, pattern, requirement in PASSWORD_RULES
        if enabled and not re.search(pattern, password)
    )
    if PASSWORD_FORBIDS_OTHER_SYMBOLS:
        allowed = f'^[A-Za-z0-9{re.escape(ALLOWED_SPECIAL_CHARS)}]+$'
        if not re.match(allowed, password):
            errors.append(
                'запрещены иные символы кроме латиницы, цифр и символов: '
                f'{ALLOWED_SPECIAL_CHARS}',
            )
    return errors


def validate_password_strength(value: Optional[str]) -> Optional[str]:
    """Выполняет проверки пароля на соответствие требованиям."""
    if not isinstance(value, str):
        raise ValueError('Пароль должен быть строкой')
    errors = collect_password_errors(value)
    if errors:
        raise ValueError('Пароль нарушает требования: ' + '; '.join(errors))
    return value
