import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from table_booking.core.config import LOG_DIR, settings
from table_booking.core.constants import (
    ERROR_LOG_NAME,
    FILE_LOG_FORMAT,
    INTERCEPTED_LOGGERS,
    LOG_COMPRESSION,
    LOG_DEPTH,
    LOG_ENCODING,
    LOG_FORMAT,
    get_logger_header,
)


class InterceptHandler(logging.Handler):
    """Перехват stdlib логов (uvicorn, sqlalchemy, celery) в loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=LOG_DEPTH, exception=record.exc_info).log(
            level,
            record.getMessage(),
        )


def setup_stdlib_intercept() -> None:
    """Перенаправляет стандартные логи в Loguru.

    Повторный вызов заменяет обработчики, а не добавляет новые.
    """
    handler = InterceptHandler()
    logging.basicConfig(handlers=[handler], level=logging.NOTSET, force=True)
    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False


def _ensure_defaults(record: dict) -> None:
    """Значения extra-полей для записей вне HTTP-запроса."""
    extra = record['extra']
    extra.setdefault('username', 'SYSTEM')
    extra.setdefault('user_id', '-')
    extra.setdefault('request_id', '-')


def _prepare_file(path: Path) -> Path:
    """Создаёт лог-файл с заголовком, если он новый или пустой."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and path.stat().st_size:
        return path
    try:
        with open(path, 'a', encoding=LOG_ENCODING) as f:
            f.write(get_logger_header())
    except OSError as e:
        print(f'Не удалось записать заголовок в файл {path}: {e}')
    return path


def _add_file_sink(path: Path, level: str) -> None:
    logger.add(
        _prepare_file(path),
        level=level,
        rotation=settings.LOG_ROTATION,
        retention=settings.LOG_RETENTION,
        compression=LOG_COMPRESSION,
        format=FILE_LOG_FORMAT,
        encoding=LOG_ENCODING,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )


def configure_logging(
    log_dir: Optional[Path] = None,
    log_name: str = 'app.log',
) -> None:
    """Настраивает Loguru: консоль, общий файл и файл ошибок.

    Args:
        log_dir: Каталог лог-файлов. По умолчанию LOG_DIR.
        log_name: Имя общего лог-файла; воркер Celery пишет в свой.

    """
    log_dir = log_dir or LOG_DIR

    logger.remove()
    logger.configure(patcher=_ensure_defaults)
    logger.add(
        sys.stdout,
        level=settings.LOG_LEVEL,
        format=LOG_FORMAT,
        colorize=True,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )
    _add_file_sink(log_dir / log_name, settings.LOG_LEVEL)
    _add_file_sink(log_dir / ERROR_LOG_NAME, 'ERROR')

    setup_stdlib_intercept()
