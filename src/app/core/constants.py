# Настройки расписания сеансов
SHOWTIME_BUFFER_MINUTES = 15  # уборка зала и смена зрителей
SHOWTIME_MAX_DURATION_MINUTES = 240
BATCH_MAX_SIZE = 50
WRITE_TIMEOUT_SECONDS = 5.0
WRITE_RETRY_ATTEMPTS = 2
SECONDS_IN_MINUTE = 60
ROOM_ID_MAX_LENGTH = 50
MOVIE_TITLE_MAX_LENGTH = 255

# Имя ограничения-исключения в БД и его SQLSTATE
SHOWTIME_NO_OVERLAP_CONSTRAINT = 'showtime_no_overlap'
EXCLUSION_VIOLATION_SQLSTATE = '23P01'
# Коды ошибок Postgres, после которых запрос можно безопасно повторить
TRANSIENT_SQLSTATES = frozenset(
    {
        '40001',  # serialization_failure
        '40P01',  # deadlock_detected
        '55P03',  # lock_not_available
        '57014',  # query_canceled (statement_timeout)
        '57P01',  # admin_shutdown
    },
)
TRANSIENT_SQLSTATE_CLASSES = ('08',)  # connection_exception

# Настройки логгера
MS_IN_SECOND = 1000
LOG_DEPTH = 7
LOG_ENCODING = 'utf-8'
LOG_COMPRESSION = 'zip'
LOG_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | '
    '<level>{level: <8}</level> | '
    '{extra[username]}({extra[request_id]}) | '
    '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | '
    '<level>{message}</level>'
)
FILE_LOG_FORMAT = (
    '{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | '
    '{extra[username]}({extra[request_id]}) | '
    '{name}:{function}:{line} | {message}'
)
INTERCEPTED_LOGGERS = (
    'uvicorn',
    'uvicorn.error',
    'sqlalchemy',
    'alembic',
)
APP_LOG_FILE = 'showtimes.log'
# Отказы планирования (конфликты, ошибки длительности, сбои хранилища)
SCHEDULING_LOG_FILE = 'scheduling.log'
SCHEDULING_LOG_MODULE = 'app.services'
SCHEDULING_LOG_LEVEL = 'WARNING'
NOISE_PATHS = {'/docs', '/openapi.json', '/health', '/livez', '/readyz'}
HTTP_LOG_TEMPLATE = (
    '{method} {path} -> {status} ({ms:.1f} ms)\n    ip={ip}\n    ua={ua}\n'
)
OPERATOR_HEADER = 'X-User'
DEFAULT_OPERATOR = 'SYSTEM'

