from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Movie
from app.repositories.base import CRUDBase
from app.schemas.movie import MovieCreate, MovieUpdate


class MovieRepository(CRUDBase[Movie, MovieCreate, MovieUpdate]):
    """Репозиторий для операций с фильмами."""

    def __init__(self) -> None:
        """Инициализация репозитория фильмов."""
        super().__init__(Movie)

    async def get_multi_not_deleted(
        self,
        session: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Movie]:
        """Получает список фильмов, не удалённых логически."""
        return await self.get(
            session,
            Movie.deleted_at.is_(None),
            many=True,
            order_by=(Movie.title,),
            offset=skip,
            limit=limit,
        )


movie_repository = MovieRepository()
