from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, status
from loguru import logger

from app.core.dependencies import SchedulingServiceDep
from app.core.exceptions import SchedulingError
from app.schemas.common import ErrorResponse
from app.schemas.showtime import RoomAvailability, ShowtimeInfo
from app.utils.http import build_error, scheduling_http_error

router = APIRouter(prefix='/rooms', tags=['Залы'])


@router.get(
    '/{room_id}/availability',
    response_model=RoomAvailability,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_room_availability(
    room_id: str,
    service: SchedulingServiceDep,
    start: datetime = Query(..., description='Начало окна'),
    end: datetime = Query(..., description='Конец окна'),
) -> RoomAvailability:
    """Проверяет, свободен ли зал в окне [start, end).

    Args:
        room_id: Идентификатор зала
        service: Сервис планирования сеансов
        start: Начало окна с часовым поясом
        end: Конец окна с часовым поясом
    Returns:
        RoomAvailability: Флаг доступности и сеансы, занимающие окно
    Raises:
        HTTPException: 400 если окно некорректно

    """
    try:
        return await service.room_availability(room_id, start, end)
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Ошибка проверки занятости зала {room_id}: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/{room_id}/showtimes',
    response_model=list[ShowtimeInfo],
    responses={
        status.HTTP_503_SERVICE_UNAVAILABLE: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_room_schedule(
    room_id: str,
    service: SchedulingServiceDep,
) -> list[ShowtimeInfo]:
    """Получает все сеансы, занимающие зал, по возрастанию начала."""
    try:
        return await service.room_schedule(room_id)
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Ошибка получения расписания зала {room_id}: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
