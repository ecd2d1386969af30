from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Базовая схема с camelCase-именами полей в JSON.

    На вход принимаются оба варианта имён: camelCase и snake_case.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Базовая схема ответа с описанием ошибки."""

    code: int
    detail: str


class CapacityErrorResponse(CamelModel):
    """Ответ при нехватке мест с текущим остатком."""

    code: int
    detail: str
    available_seats: int


class InvalidArgumentResponse(ErrorResponse):
    """Ответ о некорректном аргументе с именем поля."""

    field: Optional[str] = None


def reject_explicit_nulls(model: BaseModel) -> None:
    """Явный null в PATCH/PUT не означает «не менять поле»."""
    for field in model.model_fields_set:
        if getattr(model, field) is None:
            raise ValueError(f'Поле {to_camel(field)} не может быть null')
