from typing import Any, Generic, Iterable, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Load

from app.core.config import settings
from app.core.db import Base
from app.repositories.errors import translate_storage_errors

ModelT = TypeVar('ModelT', bound=Base)
CreateSchemaT = TypeVar('CreateSchemaT', bound=BaseModel)
UpdateSchemaT = TypeVar('UpdateSchemaT', bound=BaseModel)


class CRUDBase(Generic[ModelT, CreateSchemaT, UpdateSchemaT]):
    """Базовый класс для CRUD операций."""

    def __init__(self, model: Type[ModelT]) -> None:
        """Инициализация класса."""
        self.model = model

    async def get(
        self,
        session: AsyncSession,
        *predicates: Any,
        many: bool = False,
        order_by: Sequence[Any] = (),
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        options: Iterable[Load] = (),
        **filters: Any,
    ) -> list[ModelT] | ModelT:
        """Универсальная выборка по равенствам полям модели.

        get(..., field=value, ...).

        Параметры:
            session: AsyncSession.
            *predicates: произвольные SQLAlchemy-условия
            (например, Model.deleted_at.is_(None)).
            many: True — вернуть список, False — вернуть первый или None.
            order_by, limit, offset: необязательные параметры выдачи.
            options: ORM-опции загрузки (selectinload и т.п.).
            **filters: равенства по полям модели (field=value).

        Исключения:
            ValueError — если передан фильтр по несуществующему полю модели.
        """
        self._validate_filters(filters)
        conditions = [getattr(self.model, k) == v for k, v in filters.items()]
        if predicates:
            conditions.extend(predicates)

        stmt = select(self.model).where(*conditions)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        if options:
            stmt = stmt.options(*options)

        async with translate_storage_errors(
            session,
            table=self.model.__tablename__,
        ):
            res = await session.execute(stmt)
        return list(res.scalars().all()) if many else res.scalars().first()

    async def get_not_deleted(
        self,
        session: AsyncSession,
        obj_id: Any,
    ) -> Optional[ModelT]:
        """Получает запись по id, если она не удалена логически."""
        return await self.get(
            session,
            self.model.deleted_at.is_(None),
            id=obj_id,
        )

    async def create(
        self,
        obj_in: CreateSchemaT,
        session: AsyncSession,
    ) -> ModelT:
        """Создание записи в БД."""
        db_obj = self.model(**obj_in.model_dump(exclude_unset=True))
        async with translate_storage_errors(
            session,
            table=self.model.__tablename__,
        ):
            await self._bound_transaction(session)
            session.add(db_obj)
            await session.commit()
            await session.refresh(db_obj)
        return db_obj

    async def update_fields(
        self,
        db_obj: ModelT,
        values: dict[str, Any],
        session: AsyncSession,
    ) -> ModelT:
        """Обновление полей записи в одной транзакции."""
        async with translate_storage_errors(
            session,
            table=self.model.__tablename__,
            id=db_obj.id,
        ):
            await self._bound_transaction(session)
            for field, value in values.items():
                setattr(db_obj, field, value)
            session.add(db_obj)
            await session.commit()
            await session.refresh(db_obj)
        return db_obj

    async def _bound_transaction(self, session: AsyncSession) -> None:
        """Ограничивает длительность операторов текущей транзакции."""
        await session.execute(
            text(f'SET LOCAL statement_timeout = {settings.write_timeout_ms}'),
        )

    def _validate_filters(self, filters: dict[str, Any]) -> None:
        """Валидация фильтров, примененных к get()."""
        unknown = [k for k in filters if not hasattr(self.model, k)]
        if unknown:
            raise ValueError(
                'Некорректные поля фильтра для '
                f'{self.model.__name__}: {unknown}',
            )
