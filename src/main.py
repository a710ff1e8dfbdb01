# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.v1.router import api_router
from src.config import Settings, settings
from src.schemas.common import ErrorResponse, HealthResponse
from src.services.errors import (
    NotFoundError,
    ServiceError,
    TransientError,
    ValidationError,
)
from src.services.simulator import SimulatedBackend, build_backend

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[ServiceError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    TransientError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load or seed the collections before serving requests."""
    backend: SimulatedBackend = app.state.backend
    logger.info("Initializing collections...")
    await backend.initialize()
    logger.info(
        f"Serving {await backend.contacts.count()} contacts and "
        f"{await backend.tasks.count()} tasks"
    )

    yield

    logger.info("Shutting down")


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map store and simulator errors to status codes."""
    status_code = STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=exc.detail).model_dump(),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests as 400 ValidationError like store validation."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(message=ValidationError(problems).detail).model_dump(),
    )


def create_app(
    app_settings: Settings | None = None,
    backend: SimulatedBackend | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        app_settings: Settings to use, defaults to the environment
        backend: Prebuilt backend, built from the settings when omitted
    """
    app_settings = app_settings or settings
    logging.basicConfig(
        level=app_settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="Contacts & Tasks",
        description="Contacts with follow-up tasks over JSON file storage",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.backend = backend or build_backend(app_settings)

    # CORS middleware for frontend development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.get("/health", response_model=HealthResponse)
    def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
