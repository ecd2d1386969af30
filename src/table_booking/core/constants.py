from datetime import datetime

# Настройки требований к паролям
PASSWORD_MIN_LENGTH = 8
PASSWORD_REQUIRES_UPPER_LETTERS = True
PASSWORD_REQUIRES_LOWER_LETTERS = True
PASSWORD_REQUIRES_DIGITS = True
PASSWORD_REQUIRES_SPECIAL_CHARS = True
PASSWORD_FORBIDS_OTHER_SYMBOLS = True
ALLOWED_SPECIAL_CHARS = '!№;%:?*()_+-=:;<>,.~`'

# Настройки логгера
MS_IN_SECOND = 1000
LOG_DEPTH = 7
LOG_ENCODING = 'utf-8'
LOG_COMPRESSION = 'zip'
LOG_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | '
    '<level>{level: <8}</level> | '
    '{extra[username]}({extra[user_id]}) | '
    '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | '
    '<level>{message}</level>'
)
FILE_LOG_FORMAT = (
    '{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {extra[request_id]} | '
    '{extra[username]}({extra[user_id]}) | '
    '{name}:{function}:{line} | {message}'
)
INTERCEPTED_LOGGERS = (
    'uvicorn',
    'uvicorn.error',
    'sqlalchemy',
    'celery',
)
ERROR_LOG_NAME = 'errors.log'
NOISE_PATHS = {'/docs', '/openapi.json', '/health', '/livez', '/readyz'}
HTTP_LOG_TEMPLATE = (
    '{method} {path} -> {status} ({ms:.1f} ms)\n    ip={ip}\n    ua={ua}\n'
)

# Длительности бронирования в минутах по токенам API
DURATION_MINUTES = {
    '15min': 15,
    '30min': 30,
    '45min': 45,
    '1h': 60,
}

# Ограничения ресторана
MAX_TOTAL_SEATS = 10_000
RESTAURANT_NAME_MAX_LENGTH = 128

# Разрешённый формат контактного телефона
PHONE_PATTERN = r'^\+?[0-9]{10,15}$'

# Ключи кеша
RESTAURANTS_CACHE_PREFIX = 'restaurants'
RESTAURANTS_LIST_CACHE_KEY = f'{RESTAURANTS_CACHE_PREFIX}:list'

# Назначение JWT для подтверждения почты
VERIFY_TOKEN_PURPOSE = 'verify'

# Код ответа на ошибки валидации запроса
VALIDATION_ERROR_STATUS = 422

# Транзиентные ошибки БД, после которых допуск брони повторяется
RETRYABLE_SQLSTATES = frozenset({
    '40001',  # serialization_failure
    '40P01',  # deadlock_detected
    '55P03',  # lock_not_available
})
RETRYABLE_DB_MESSAGES = (
    'database is locked',
    'database table is locked',
    'deadlock',
    'could not serialize',
)

# Повтор запроса после транзиентного конфликта, секунды
CONFLICT_RETRY_AFTER = 1


def get_logger_header() -> str:
    """Формирует заголовок для нового лог-файла."""
    return (
        '\n'
        '================= LOGGER - TABLE_BOOKING =================\n'
        f'Date: {datetime.now():%Y-%m-%d %H:%M:%S}\n'
        '==========================================================\n\n'
    )
