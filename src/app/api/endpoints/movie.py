from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from loguru import logger

from app.core.db import DbSession
from app.core.exceptions import SchedulingError
from app.repositories.movie import movie_repository
from app.schemas.common import ErrorResponse
from app.schemas.movie import MovieCreate, MovieInfo
from app.utils.http import build_error, scheduling_http_error
from app.utils.logging_decorator import event_logger

router = APIRouter(prefix='/movies', tags=['Фильмы'])


@router.get(
    '/',
    response_model=list[MovieInfo],
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_all_movies(
    session: DbSession,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[MovieInfo]:
    """Получает список неудалённых фильмов по алфавиту."""
    try:
        return await movie_repository.get_multi_not_deleted(
            session,
            skip=skip,
            limit=limit,
        )
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Ошибка при получении списка фильмов: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.post(
    '/',
    response_model=MovieInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создана', 'Movie')
async def create_movie(
    movie_data: MovieCreate,
    session: DbSession,
) -> MovieInfo:
    """Создает фильм, для которого затем планируются сеансы."""
    try:
        return await movie_repository.create(movie_data, session)
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Неожиданная ошибка при создании фильма: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при создании фильма',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/{movie_id}',
    response_model=MovieInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_movie_by_id(movie_id: UUID, session: DbSession) -> MovieInfo:
    """Получает фильм по идентификатору."""
    try:
        movie = await movie_repository.get_not_deleted(session, movie_id)
        if not movie:
            logger.warning(f'Фильм {movie_id} не найден')
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=build_error(
                    'Фильм не найден',
                    status.HTTP_404_NOT_FOUND,
                ),
            )
        return movie
    except HTTPException:
        raise
    except SchedulingError as e:
        raise scheduling_http_error(e)
    except Exception as e:
        logger.error(f'Ошибка при получении фильма {movie_id}: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
