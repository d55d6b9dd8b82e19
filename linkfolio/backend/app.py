"""
FastAPI application entry point.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from linkfolio.backend.config import Settings, get_settings
from linkfolio.backend.dependencies import (
    build_profile_fetcher,
    build_text_generator,
    select_storage,
)
from linkfolio.backend.enhancement import EnhancementService
from linkfolio.backend.errors import ServiceError
from linkfolio.backend.profiles import ProfileFetcher, ProfileService
from linkfolio.backend.routes import router
from linkfolio.backend.storage import Storage
from linkfolio.models.gemini import TextGenerator

logger = logging.getLogger(__name__)


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "message": message}
    )


def _format_validation_errors(exc: RequestValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(location) or "body"
        problems.append(f"{field}: {error.get('msg')}")
    return "Validation error: " + "; ".join(problems)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %r", request.method, request.url.path, exc.__cause__ or exc
            )
        return _envelope(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return _envelope(400, _format_validation_errors(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _envelope(500, ServiceError.default_message)


def create_app(
    settings: Optional[Settings] = None,
    *,
    storage: Optional[Storage] = None,
    text_generator: Optional[TextGenerator] = None,
    profile_fetcher: Optional[ProfileFetcher] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Linkfolio Backend (FastAPI)", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    enhancement_service = EnhancementService(
        text_generator or build_text_generator(settings)
    )
    app.state.storage = storage if storage is not None else select_storage(settings)
    app.state.enhancement_service = enhancement_service
    app.state.profile_service = ProfileService(
        profile_fetcher or build_profile_fetcher(settings), enhancement_service
    )

    register_exception_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
