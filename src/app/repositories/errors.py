import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from loguru import logger
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import (
    EXCLUSION_VIOLATION_SQLSTATE,
    TRANSIENT_SQLSTATE_CLASSES,
    TRANSIENT_SQLSTATES,
)
from app.core.exceptions import TransientStorageError


class ExclusionViolation(Exception):
    """БД отклонила запись из-за ограничения-исключения."""

    def __init__(self, constraint_name: Optional[str] = None) -> None:
        """Сохраняет имя нарушенного ограничения, если драйвер его сообщил."""
        super().__init__(
            f'Нарушено ограничение-исключение {constraint_name or "?"}',
        )
        self.constraint_name = constraint_name


def _sqlstate(error: DBAPIError) -> Optional[str]:
    """Достаёт SQLSTATE из исключения драйвера (asyncpg или psycopg)."""
    orig = error.orig
    code = getattr(orig, 'sqlstate', None) or getattr(orig, 'pgcode', None)
    if code is None:
        code = getattr(getattr(orig, '__cause__', None), 'sqlstate', None)
    return code


def constraint_name(error: DBAPIError) -> Optional[str]:
    """Возвращает имя нарушенного ограничения без разбора текста ошибки."""
    orig = error.orig
    # asyncpg: атрибут самой ошибки, psycopg: orig.diag
    name = getattr(orig, 'constraint_name', None) or getattr(
        getattr(orig, 'diag', None),
        'constraint_name',
        None,
    )
    if name:
        return name
    return getattr(getattr(orig, '__cause__', None), 'constraint_name', None)


def is_exclusion_violation(error: DBAPIError) -> bool:
    """Проверяет, что ошибка вызвана ограничением-исключением."""
    return _sqlstate(error) == EXCLUSION_VIOLATION_SQLSTATE


def is_transient(error: DBAPIError) -> bool:
    """Проверяет, что после ошибки запрос можно безопасно повторить."""
    if error.connection_invalidated:
        return True
    code = _sqlstate(error)
    if code is None:
        return False
    return code in TRANSIENT_SQLSTATES or code.startswith(
        TRANSIENT_SQLSTATE_CLASSES,
    )


@asynccontextmanager
async def translate_storage_errors(
    session: AsyncSession,
    **context: Any,
) -> AsyncIterator[None]:
    """Переводит ошибки БД в типизированные ошибки хранилища.

    Нарушение ограничения-исключения становится ``ExclusionViolation``,
    сетевые сбои, таймауты и взаимоблокировки становятся
    ``TransientStorageError``. Остальные ошибки пробрасываются как есть.
    Во всех случаях транзакция откатывается целиком.
    """
    try:
        yield
    except IntegrityError as e:
        await session.rollback()
        if is_exclusion_violation(e):
            name = constraint_name(e)
            logger.warning(
                f'БД отклонила пересекающийся сеанс ({name}): {context}',
            )
            raise ExclusionViolation(name) from e
        raise
    except DBAPIError as e:
        await session.rollback()
        if is_transient(e):
            logger.warning(f'Временный сбой БД {context}: {e}')
            raise TransientStorageError() from e
        raise
    except (asyncio.TimeoutError, TimeoutError) as e:
        await session.rollback()
        logger.warning(f'Таймаут подтверждения записи {context}')
        raise TransientStorageError(
            'Хранилище не подтвердило запись вовремя',
        ) from e
