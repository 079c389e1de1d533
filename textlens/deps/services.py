"""Service dependency injection for FastAPI routes.

Provides factory functions for injecting domain services into API endpoints.
Process-wide singletons (LLM provider, admission queue) are set once during
startup; per-request services are built around the request's DB session.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from textlens.core.admission import AdmissionQueue
from textlens.core.config import get_settings
from textlens.deps.db import get_db
from textlens.integrations.llm import LLMProvider
from textlens.services import (
    AnalysisService,
    AnalysisStorageService,
    SearchService,
)


# -----------------------------------------------------------------------------
# LLM Provider Dependency
# -----------------------------------------------------------------------------

# Global LLM provider instance (initialized on startup)
_llm_provider: LLMProvider | None = None


def set_llm_provider(provider: LLMProvider | None) -> None:
    """Set the global LLM provider instance (called during app startup)."""
    global _llm_provider
    _llm_provider = provider


def get_llm_provider() -> LLMProvider:
    """Get the LLM provider instance.

    Raises:
        RuntimeError: If the provider is not initialized
    """
    if _llm_provider is None:
        raise RuntimeError("LLM provider not initialized")
    return _llm_provider


def get_llm_provider_optional() -> LLMProvider | None:
    """Get the LLM provider, or None before startup."""
    return _llm_provider


# -----------------------------------------------------------------------------
# Admission Queue Dependency
# -----------------------------------------------------------------------------

# Global admission queue (initialized on startup)
_admission_queue: AdmissionQueue | None = None


def set_admission_queue(queue: AdmissionQueue | None) -> None:
    """Set the global admission queue (called during app startup)."""
    global _admission_queue
    _admission_queue = queue


def get_admission_queue() -> AdmissionQueue:
    """Get the admission queue.

    Raises:
        RuntimeError: If the queue is not initialized
    """
    if _admission_queue is None:
        raise RuntimeError("Admission queue not initialized")
    return _admission_queue


def get_admission_queue_optional() -> AdmissionQueue | None:
    """Get the admission queue, or None before startup."""
    return _admission_queue


# -----------------------------------------------------------------------------
# Service Dependencies
# -----------------------------------------------------------------------------


def get_analysis_service() -> AnalysisService:
    """FastAPI dependency for AnalysisService."""
    settings = get_settings()
    return AnalysisService(
        get_llm_provider(),
        short_text_word_threshold=settings.short_text_word_threshold,
    )


async def get_storage_service(
    db: AsyncSession = Depends(get_db),
) -> AsyncGenerator[AnalysisStorageService, None]:
    """FastAPI dependency for AnalysisStorageService.

    Args:
        db: Database session

    Yields:
        Configured AnalysisStorageService instance
    """
    yield AnalysisStorageService(db)


async def get_search_service(
    storage: AnalysisStorageService = Depends(get_storage_service),
) -> AsyncGenerator[SearchService, None]:
    """FastAPI dependency for SearchService.

    Args:
        storage: Storage service bound to the request's session

    Yields:
        Configured SearchService instance
    """
    settings = get_settings()
    yield SearchService(
        storage,
        default_limit=settings.search_default_limit,
        max_limit=settings.search_max_limit,
        max_topic_length=settings.search_max_topic_length,
    )


# Type aliases for dependency injection
LLMProviderDep = Annotated[LLMProvider, Depends(get_llm_provider)]
AdmissionQueueDep = Annotated[AdmissionQueue, Depends(get_admission_queue)]
AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]
StorageServiceDep = Annotated[AnalysisStorageService, Depends(get_storage_service)]
SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]
