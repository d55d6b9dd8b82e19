"""
Dependency wiring for the FastAPI app.

Backends are constructed once by ``create_app`` and kept on ``app.state``;
handlers receive them through the ``get_*`` dependencies below.
"""

from __future__ import annotations

import logging

from fastapi import Request
from pymongo.errors import PyMongoError

from linkfolio.backend.config import Settings
from linkfolio.backend.document_store import MongoStorage
from linkfolio.backend.enhancement import EnhancementService
from linkfolio.backend.errors import StorageUnavailableError
from linkfolio.backend.profiles import (
    HttpProfileFetcher,
    MockProfileFetcher,
    ProfileFetcher,
    ProfileService,
)
from linkfolio.backend.storage import InMemoryStorage, Storage
from linkfolio.models.gemini import GeminiClient, TextGenerator

logger = logging.getLogger(__name__)


def select_storage(settings: Settings) -> Storage:
    """
    Choose the storage backend at start-up.

    The MongoDB store is used only when enabled and reachable within the
    configured timeout; otherwise the in-memory store is returned.
    """
    if not settings.use_document_store:
        logger.info("Using in-memory storage")
        return InMemoryStorage()

    try:
        storage = MongoStorage(
            settings.mongodb_uri,
            database=settings.mongodb_database,
            timeout_seconds=settings.document_store_timeout_seconds,
        )
        storage.ping()
        storage.ensure_indexes()
    except (StorageUnavailableError, PyMongoError, ValueError) as exc:
        logger.warning(
            "MongoDB unavailable (%s), falling back to in-memory storage",
            exc.__cause__ or exc,
        )
        return InMemoryStorage()
    logger.info("Connected to MongoDB successfully")
    return storage


def build_text_generator(settings: Settings) -> TextGenerator:
    return GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout_seconds=settings.llm_timeout_seconds,
    )


def build_profile_fetcher(settings: Settings) -> ProfileFetcher:
    if settings.profile_api_url:
        return HttpProfileFetcher(
            settings.profile_api_url,
            timeout_seconds=settings.profile_fetch_timeout_seconds,
        )
    return MockProfileFetcher(delay_seconds=settings.mock_fetch_delay_seconds)


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_enhancement_service(request: Request) -> EnhancementService:
    return request.app.state.enhancement_service


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service
