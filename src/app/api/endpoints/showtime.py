from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from loguru import logger

from app.core.dependencies import (
    BatchSchedulerDep,
    OperatorDep,
    SchedulingServiceDep,
)
from app.core.exceptions import SchedulingError
from app.schemas.common import ErrorResponse
from app.schemas.showtime import (
    BatchResultInfo,
    ShowtimeBatchCreate,
    ShowtimeCreate,
    ShowtimeInfo,
    ShowtimeUpdate,
)
from app.utils.enums import ShowtimeStatus
from app.utils.http import build_error, scheduling_http_error
from app.utils.logging_decorator import event_logger

router = APIRouter(prefix='/showtimes', tags=['Сеансы'])


def _internal_error(message: str) -> HTTPException:
    """Ответ 500 с единым форматом ошибки."""
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=build_error(
            message,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ),
    )


@router.get(
    '/',
    response_model=list[ShowtimeInfo],
    responses={
        status.HTTP_503_SERVICE_UNAVAILABLE: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_all_showtimes(
    service: SchedulingServiceDep,
    room_id: Optional[str] = Query(None, description='Идентификатор зала'),
    movie_id: Optional[UUID] = Query(None, description='ID фильма'),
    day: Optional[date] = Query(None, description='День показа (UTC)'),
    showtime_status: Optional[ShowtimeStatus] = Query(
        ShowtimeStatus.ACTIVE,
        alias='status',
        description='Статус сеанса',
    ),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[ShowtimeInfo]:
    """Получает список сеансов с фильтрами по залу, фильму, дню и статусу.

    Сеансы отсортированы по времени начала, удалённые не возвращаются.
    """
    try:
        return await service.list_showtimes(
            room_id=room_id,
            movie_id=movie_id,
            day=day,
            status=showtime_status,
            skip=skip,
            limit=limit,
        )
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Ошибка при получении списка сеансов: {str(e)}')
        raise _internal_error('Внутренняя ошибка сервера')


@router.post(
    '/',
    response_model=ShowtimeInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_409_CONFLICT: {'model': ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создана', 'Showtime')
async def create_showtime(
    showtime_data: ShowtimeCreate,
    service: SchedulingServiceDep,
    operator: OperatorDep,
) -> ShowtimeInfo:
    """Создает сеанс, если зал свободен в вычисленном окне.

    Args:
        showtime_data: Данные для создания сеанса
        service: Сервис планирования сеансов
        operator: Имя пользователя для полей аудита
    Returns:
        ShowtimeInfo: Созданный сеанс с вычисленным временем окончания
    Raises:
        HTTPException: 400 при нарушении правил длительности
        HTTPException: 404 если фильм не найден
        HTTPException: 409 если окно в зале уже занято
        HTTPException: 503 если хранилище недоступно

    """
    try:
        return await service.create_showtime(showtime_data, operator)
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Неожиданная ошибка при создании сеанса: {str(e)}')
        raise _internal_error('Внутренняя ошибка сервера при создании сеанса')


@router.post(
    '/bulk',
    response_model=BatchResultInfo,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def create_showtimes_bulk(
    batch_data: ShowtimeBatchCreate,
    scheduler: BatchSchedulerDep,
    operator: OperatorDep,
) -> BatchResultInfo:
    """Создает пакет сеансов по одному, не прерываясь на ошибках элементов.

    Args:
        batch_data: Список сеансов для создания
        scheduler: Пакетный планировщик
        operator: Имя пользователя для полей аудита
    Returns:
        BatchResultInfo: Созданные сеансы, отказы с индексами и сводка
    Raises:
        HTTPException: 400 для пустого пакета или при превышении лимита;
            некорректные элементы попадают в failed с kind INVALID_INPUT

    """
    try:
        return await scheduler.create_many(batch_data.showtimes, operator)
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Ошибка при пакетном создании сеансов: {str(e)}')
        raise _internal_error(
            'Внутренняя ошибка сервера при пакетном создании сеансов',
        )


@router.get(
    '/{showtime_id}',
    response_model=ShowtimeInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_showtime_by_id(
    showtime_id: UUID,
    service: SchedulingServiceDep,
) -> ShowtimeInfo:
    """Получает сеанс по идентификатору."""
    try:
        return await service.get_showtime(showtime_id)
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Ошибка при получении сеанса {showtime_id}: {str(e)}')
        raise _internal_error('Внутренняя ошибка сервера')


@router.patch(
    '/{showtime_id}',
    response_model=ShowtimeInfo,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_409_CONFLICT: {'model': ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Обновлена', 'Showtime')
async def update_showtime(
    showtime_id: UUID,
    update_data: ShowtimeUpdate,
    service: SchedulingServiceDep,
    operator: OperatorDep,
) -> ShowtimeInfo:
    """Обновляет сеанс, повторно проверяя окно при переносе.

    Args:
        showtime_id: UUID идентификатор сеанса
        update_data: Данные для обновления
        service: Сервис планирования сеансов
        operator: Имя пользователя для полей аудита
    Returns:
        ShowtimeInfo: Обновленный сеанс
    Raises:
        HTTPException: 404 если сеанс или фильм не найден
        HTTPException: 400 при нарушении правил длительности
        HTTPException: 409 если новое окно в зале занято

    """
    try:
        return await service.update_showtime(
            showtime_id,
            update_data,
            operator,
        )
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Неожиданная ошибка при обновлении сеанса: {str(e)}')
        raise _internal_error(
            'Внутренняя ошибка сервера при обновлении сеанса',
        )


@router.delete(
    '/{showtime_id}',
    response_model=ShowtimeInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def delete_showtime(
    showtime_id: UUID,
    service: SchedulingServiceDep,
    operator: OperatorDep,
) -> ShowtimeInfo:
    """Логически удаляет сеанс и освобождает его окно в зале."""
    try:
        return await service.delete_showtime(showtime_id, operator)
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Ошибка при удалении сеанса {showtime_id}: {str(e)}')
        raise _internal_error('Внутренняя ошибка сервера при удалении сеанса')
