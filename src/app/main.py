from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.endpoints import routers
from app.core.db import engine
from app.core.exception_handler import (
    http_exception_handler,
    validation_exception_handler,
)
from app.core.logging import configure_logging
from app.middleware.http_logging import logging_middleware


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator:
    """Запускает логгер при старте и закрывает пул соединений при остановке."""
    configure_logging()
    yield
    await engine.dispose()


app = FastAPI(
    title='Расписание сеансов кинотеатра',
    description='API для планирования сеансов без пересечений в залах',
    version='0.1.0',
    lifespan=lifespan,
    root_path='/api',
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)

app.middleware('http')(logging_middleware)


for router in routers:
    app.include_router(router)
