"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from taskseries.config import SETTINGS
from taskseries.domain.errors import StorageError, ValidationError
from taskseries.infra.db import init_db
from taskseries.infra.logging import setup_logging

from .routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging("api")
    logger.info("Starting recurring series API")
    init_db()
    yield
    logger.info("Shutting down recurring series API")


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Task storage is unavailable"},
    )


def create_app() -> FastAPI:
    app = FastAPI(title="Recurring task series", lifespan=lifespan)
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)
    app.include_router(router, prefix=SETTINGS.api_prefix)

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app


app = create_app()


def run() -> None:
    uvicorn.run(app, host=SETTINGS.api_host, port=SETTINGS.api_port)


if __name__ == "__main__":
    run()
