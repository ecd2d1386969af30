from datetime import datetime, timezone

from table_booking.core.exceptions import InvalidArgumentError


def ensure_utc(value: datetime) -> datetime:
    """Приводит момент времени к UTC; наивное время считается UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(
    value: datetime | str,
    field: str = 'reservationTime',
) -> datetime:
    """Разбирает ISO-8601 строку или datetime в момент времени UTC."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        try:
            # fromisoformat до 3.11 не понимает суффикс Z
            return ensure_utc(
                datetime.fromisoformat(value.strip().replace('Z', '+00:00')),
            )
        except ValueError:
            pass
    raise InvalidArgumentError(
        f'Некорректное время {value!r}, ожидается ISO-8601',
        field=field,
    )
