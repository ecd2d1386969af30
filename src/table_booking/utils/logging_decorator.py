import json
from functools import wraps
from typing import Any, Callable, Optional

from loguru import logger
from pydantic import BaseModel

SENSITIVE_FIELDS = frozenset({'password', 'hashed_password', 'token'})


def _serialize(obj: Any, only_set: bool = True) -> Optional[dict]:
    """Сериализует тело запроса для лога, скрывая чувствительные поля."""
    if not isinstance(obj, BaseModel):
        return None
    data = obj.model_dump(
        mode='json',
        by_alias=True,
        exclude_none=True,
        exclude_unset=only_set,
    )
    return {
        key: '***' if key in SENSITIVE_FIELDS else value
        for key, value in data.items()
    }


def event_logger(
    event_type: str,
    table_name: str,
    only_set: bool = True,
) -> Callable:
    """Декоратор для логирования изменяющих эндпоинтов.

    После успешного выполнения пишет в лог тип события, таблицу,
    идентификатор записи и параметры тела запроса. При ошибке пишет,
    с какой таблицей не удалась операция, и пробрасывает исключение.

    Args:
        event_type: Тип события ('Создана', 'Обновлена', 'Отменена').
        table_name: Название таблицы, над которой выполняется операция.
        only_set: Логировать только переданные клиентом поля.

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            parameters = next(
                (
                    data
                    for data in (
                        _serialize(v, only_set) for v in kwargs.values()
                    )
                    if data is not None
                ),
                None,
            )
            try:
                result = await func(*args, **kwargs)
            except Exception:
                logger.error(
                    f'Произошла ошибка при выполнении операции с '
                    f'таблицей "{table_name}"',
                )
                raise
            message = (
                f'{event_type} запись {getattr(result, "id", "")} '
                f'в таблице "{table_name}"'
            )
            if parameters:
                formatted = json.dumps(
                    parameters,
                    ensure_ascii=False,
                    indent=4,
                )
                message = f'{message}, с параметрами:\n{formatted}'
            logger.info(message)
            return result

        return wrapper

    return decorator
