import logging
import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

from app.core.config import LOG_DIR, settings
from app.core.constants import (
    APP_LOG_FILE,
    DEFAULT_OPERATOR,
    FILE_LOG_FORMAT,
    INTERCEPTED_LOGGERS,
    LOG_COMPRESSION,
    LOG_DEPTH,
    LOG_ENCODING,
    LOG_FORMAT,
    SCHEDULING_LOG_FILE,
    SCHEDULING_LOG_LEVEL,
    SCHEDULING_LOG_MODULE,
)

_STD_INTERCEPT_CONFIGURED = False


class InterceptHandler(logging.Handler):
    """Перехват stdlib логов (uvicorn, sqlalchemy, alembic) в loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Передаёт запись стандартного логгера в Loguru."""
        try:
            lvl = logger.level(record.levelname).name
        except ValueError:
            lvl = record.levelno
        logger.opt(
            depth=LOG_DEPTH,
            exception=False,
        ).log(lvl, record.getMessage())


def setup_stdlib_intercept() -> None:
    """Перенаправляет стандартные логи в Loguru один раз за процесс."""
    global _STD_INTERCEPT_CONFIGURED
    if _STD_INTERCEPT_CONFIGURED:
        return
    root = logging.getLogger()
    root.handlers = [InterceptHandler()]
    root.setLevel(logging.NOTSET)

    for name in INTERCEPTED_LOGGERS:
        log = logging.getLogger(name)
        log.handlers = [InterceptHandler()]
        log.propagate = False
    _STD_INTERCEPT_CONFIGURED = True


def _ensure_defaults(record: dict) -> dict:
    """Подставляет оператора и request_id для записей вне HTTP-запроса."""
    record['extra'].setdefault('username', DEFAULT_OPERATOR)
    record['extra'].setdefault('request_id', '-')
    return record


def _is_scheduling_record(record: dict) -> bool:
    """Запись сервисов планирования: конфликты, отказы, сбои хранилища."""
    return (record['name'] or '').startswith(SCHEDULING_LOG_MODULE)


def _log_header() -> str:
    """Заголовок лог-файла с действующими правилами расписания."""
    return (
        '\n'
        '=================== LOGGER - CINEMA_SHOWTIMES ===================\n'
        f'Date: {datetime.now():%Y-%m-%d %H:%M:%S}\n'
        f'Buffer: {settings.SHOWTIME_BUFFER_MINUTES} min, '
        f'max duration: {settings.SHOWTIME_MAX_DURATION_MINUTES} min, '
        f'batch limit: {settings.BATCH_MAX_SIZE}\n'
        f'Write timeout: {settings.WRITE_TIMEOUT_SECONDS} s, '
        f'retries: {settings.WRITE_RETRY_ATTEMPTS}\n'
        '================================================================\n\n'
    )


def _write_log_header(path: Path) -> None:
    """Записывает заголовок в начало нового или пустого лог-файла."""
    if path.exists() and path.stat().st_size > 0:
        return
    try:
        with open(path, 'a', encoding=LOG_ENCODING) as f:
            f.write(_log_header())
    except OSError as e:
        print(f'Не удалось записать заголовок в файл {path}: {e}')


def _add_file_sink(path: Path, level: str, **options) -> None:
    logger.add(
        path,
        level=level,
        rotation=settings.LOG_ROTATION,
        retention=settings.LOG_RETENTION,
        compression=LOG_COMPRESSION,
        format=FILE_LOG_FORMAT,
        encoding=LOG_ENCODING,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        **options,
    )


def configure_logging() -> None:
    """Настраивает Loguru и подключает перехват логов stdlib.

    Sinks: цветной stdout, общий файл приложения и отдельный файл
    отказов планирования, который оператор просматривает, чтобы
    разбирать конфликты расписания вручную.
    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    app_log = LOG_DIR / APP_LOG_FILE
    scheduling_log = LOG_DIR / SCHEDULING_LOG_FILE
    for path in (app_log, scheduling_log):
        _write_log_header(path)

    logger.remove()
    logger.configure(patcher=_ensure_defaults)

    logger.add(
        sys.stdout,
        level=settings.LOG_LEVEL,
        format=LOG_FORMAT,
        colorize=True,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )
    _add_file_sink(app_log, settings.LOG_LEVEL)
    _add_file_sink(
        scheduling_log,
        SCHEDULING_LOG_LEVEL,
        filter=_is_scheduling_record,
    )

    setup_stdlib_intercept()
