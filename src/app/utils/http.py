from typing import Any, Optional

from fastapi import HTTPException

from app.core.exceptions import SchedulingError


def build_error(
    detail: Any,
    code: int,
    kind: Optional[str] = None,
) -> dict[str, Any]:
    """Формирует унифицированный ответ об ошибке для API."""
    error = {'code': code, 'detail': str(detail) if detail is not None else ''}
    if kind is not None:
        error['kind'] = kind
    return error


def scheduling_http_error(error: SchedulingError) -> HTTPException:
    """Переводит ошибку планирования в HTTPException с её кодом и kind."""
    return HTTPException(
        status_code=error.status_code,
        detail=build_error(
            error.message,
            error.status_code,
            error.kind.value,
        ),
    )
