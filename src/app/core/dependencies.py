from typing import Annotated

from fastapi import Depends, Request

from app.core.constants import DEFAULT_OPERATOR
from app.core.db import DbSession
from app.services.batch_scheduler import BatchScheduler
from app.services.scheduling_service import SchedulingService


async def get_scheduling_service(session: DbSession) -> SchedulingService:
    """Зависимость для получения сервиса планирования сеансов."""
    return SchedulingService(session)


SchedulingServiceDep = Annotated[
    SchedulingService,
    Depends(get_scheduling_service),
]


async def get_batch_scheduler(
    service: SchedulingServiceDep,
) -> BatchScheduler:
    """Зависимость для получения пакетного планировщика."""
    return BatchScheduler(service)


BatchSchedulerDep = Annotated[BatchScheduler, Depends(get_batch_scheduler)]


async def get_operator(request: Request) -> str:
    """Имя пользователя запроса для полей аудита."""
    return getattr(request.state, 'username', DEFAULT_OPERATOR)


OperatorDep = Annotated[str, Depends(get_operator)]
