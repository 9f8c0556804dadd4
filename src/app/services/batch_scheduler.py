from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, Union

from loguru import logger
from pydantic import ValidationError as SchemaValidationError

from app.core.config import settings
from app.core.exceptions import (
    NotFoundError,
    ScheduleConflictError,
    SchedulingError,
    TransientStorageError,
    ValidationError,
)
from app.schemas.showtime import (
    BatchItemError,
    BatchResultInfo,
    BatchSummary,
    ShowtimeCreate,
    ShowtimeInfo,
)
from app.utils.enums import SchedulingErrorKind

if TYPE_CHECKING:
    from app.services.scheduling_service import SchedulingService

BatchCandidate = Union[ShowtimeCreate, Mapping[str, Any]]


def _schema_errors(error: SchemaValidationError) -> str:
    """Собирает сообщения pydantic в одну строку."""
    return '; '.join(
        item['msg'].replace('Value error, ', '') for item in error.errors()
    )


class BatchScheduler:
    """Последовательное создание пакета сеансов с изоляцией отказов.

    Элементы обрабатываются строго по очереди, поэтому каждый следующий
    видит уже зафиксированные сеансы предыдущих и пересечения внутри
    одного пакета ловятся обычной проверкой. Некорректный элемент, отказ
    бизнес-правил или недоступность хранилища фиксируются по индексу
    элемента и не прерывают пакет.
    """

    def __init__(
        self,
        service: 'SchedulingService',
        max_size: Optional[int] = None,
    ) -> None:
        """Инициализация с сервисом планирования и лимитом пакета."""
        self.service = service
        self.max_size = (
            settings.BATCH_MAX_SIZE if max_size is None else max_size
        )

    async def create_many(
        self,
        candidates: Sequence[BatchCandidate],
        operator: Optional[str] = None,
    ) -> BatchResultInfo:
        """Создает сеансы пакета по одному.

        Args:
            candidates: Данные сеансов: схемы или сырые словари запроса
            operator: Имя пользователя для полей аудита

        Returns:
            BatchResultInfo: Созданные сеансы, отказы с индексами и сводка

        Raises:
            ValidationError: BATCH_TOO_LARGE при превышении лимита,
                INVALID_INPUT для пустого пакета

        """
        if len(candidates) > self.max_size:
            raise ValidationError(
                SchedulingErrorKind.BATCH_TOO_LARGE,
                f'Максимум {self.max_size} сеансов за одну операцию, '
                f'передано {len(candidates)}',
            )
        if not candidates:
            raise ValidationError(
                SchedulingErrorKind.INVALID_INPUT,
                'Требуется хотя бы один сеанс',
            )

        succeeded: list[ShowtimeInfo] = []
        failed: list[BatchItemError] = []
        transient: list[BatchItemError] = []
        for index, raw in enumerate(candidates):
            if isinstance(raw, ShowtimeCreate):
                candidate = raw
            else:
                try:
                    candidate = ShowtimeCreate.model_validate(raw)
                except SchemaValidationError as e:
                    reason = _schema_errors(e)
                    logger.warning(
                        f'Элемент пакета {index} некорректен: {reason}',
                    )
                    failed.append(
                        BatchItemError(
                            index=index,
                            kind=SchedulingErrorKind.INVALID_INPUT.value,
                            reason=reason,
                            input=dict(raw),
                        ),
                    )
                    continue

            try:
                showtime = await self.service.create_showtime(
                    candidate,
                    operator,
                )
            except TransientStorageError as e:
                logger.error(
                    f'Элемент пакета {index} не записан: хранилище '
                    f'недоступно ({e.message})',
                )
                transient.append(self._item_error(index, e, candidate))
                continue
            except (
                ValidationError,
                ScheduleConflictError,
                NotFoundError,
            ) as e:
                logger.warning(
                    f'Элемент пакета {index} отклонён [{e.kind.value}]: '
                    f'{e.message}',
                )
                failed.append(self._item_error(index, e, candidate))
                continue
            succeeded.append(ShowtimeInfo.model_validate(showtime))

        summary = BatchSummary(
            total=len(candidates),
            succeeded=len(succeeded),
            failed=len(failed) + len(transient),
        )
        logger.info(
            f'Пакетное создание сеансов: {summary.succeeded} успешно, '
            f'{summary.failed} с ошибками из {summary.total}',
        )
        return BatchResultInfo(
            succeeded=succeeded,
            failed=failed,
            transient=transient,
            summary=summary,
        )

    @staticmethod
    def _item_error(
        index: int,
        error: SchedulingError,
        candidate: ShowtimeCreate,
    ) -> BatchItemError:
        """Запись об отказе элемента из ошибки планирования."""
        return BatchItemError(
            index=index,
            kind=error.kind.value,
            reason=error.message,
            input=candidate.model_dump(mode='json'),
        )
