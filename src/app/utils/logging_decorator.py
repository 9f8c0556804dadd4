import json
from functools import wraps
from typing import Any, Callable

from loguru import logger
from pydantic import BaseModel


def _serialize(obj: Any, only_set: bool = True) -> dict | None:
    """Сериализует модель Pydantic в словарь для логирования."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(
            mode='json',
            exclude_none=True,
            exclude_unset=only_set,
        )
    return None


def event_logger(
    event_type: str,
    table_name: str,
    only_set: bool = True,
) -> Callable:
    """Декоратор для логирования операций эндпоинта над таблицей.

    Логирует параметры запроса после успешного выполнения и факт ошибки,
    не перехватывая её.

    Args:
        event_type: Тип события ('Создана', 'Обновлена', 'Удалена').
        table_name: Название таблицы, над которой выполняется операция.
        only_set: Сериализовать только явно переданные поля.

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
                    f'Операция "{event_type}" с таблицей "{table_name}" '
                    f'завершилась ошибкой',
                )
                raise
            if parameters is not None:
                formatted_params = json.dumps(
                    parameters,
                    ensure_ascii=False,
                    indent=4,
                )
                logger.info(
                    f'{event_type} запись в таблице "{table_name}", '
                    f'с параметрами:\n{formatted_params}',
                )
            return result

        return wrapper

    return decorator
