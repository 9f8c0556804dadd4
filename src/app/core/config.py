from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import URL

from app.core.constants import (
    BATCH_MAX_SIZE,
    MS_IN_SECOND,
    SHOWTIME_BUFFER_MINUTES,
    SHOWTIME_MAX_DURATION_MINUTES,
    WRITE_RETRY_ATTEMPTS,
    WRITE_TIMEOUT_SECONDS,
)

BASE_DIR = Path(__file__).resolve().parents[3]
INFRA_DIR = BASE_DIR / 'infra'

LOG_DIR = BASE_DIR / 'logs'


class Settings(BaseSettings):
    """Конфигурационный класс."""

    POSTGRES_DB: str
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_PORT: int
    POSTGRES_HOST: str

    LOG_LEVEL: str = 'INFO'
    LOG_ROTATION: str = '10 MB'
    LOG_RETENTION: str = '14 days'

    SHOWTIME_BUFFER_MINUTES: int = SHOWTIME_BUFFER_MINUTES
    SHOWTIME_MAX_DURATION_MINUTES: int = SHOWTIME_MAX_DURATION_MINUTES
    BATCH_MAX_SIZE: int = BATCH_MAX_SIZE
    WRITE_TIMEOUT_SECONDS: float = WRITE_TIMEOUT_SECONDS
    WRITE_RETRY_ATTEMPTS: int = WRITE_RETRY_ATTEMPTS

    @property
    def db_url(self) -> URL:
        """Создает ссылку на подключение к Postgres."""
        return URL.create(
            drivername='postgresql+asyncpg',
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            database=self.POSTGRES_DB,
        )

    @property
    def write_timeout_ms(self) -> int:
        """Таймаут записи в миллисекундах для statement_timeout."""
        return int(self.WRITE_TIMEOUT_SECONDS * MS_IN_SECOND)

    model_config = SettingsConfigDict(
        env_file=str(INFRA_DIR / '.env'),
        extra='allow',
    )


settings = Settings()
