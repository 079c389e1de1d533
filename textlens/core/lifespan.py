"""Application startup and shutdown lifecycle management.

Provides:
- Lifespan context manager for FastAPI
- Startup hooks (database init, LLM provider init, admission queue init)
- Shutdown hooks (cleanup for all clients)
- Startup time tracking for uptime calculation
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from textlens.core.admission import AdmissionQueue
from textlens.core.config import get_settings
from textlens.core.database import close_database, init_database
from textlens.core.logging import configure_logging, get_logger
from textlens.deps.services import set_admission_queue, set_llm_provider
from textlens.integrations.llm import AnthropicLLMProvider

logger = get_logger(__name__)

# Global client for cleanup
_llm_provider: AnthropicLLMProvider | None = None

# Startup timestamp for uptime calculation
_startup_time: float | None = None


def get_uptime_seconds() -> int | None:
    """Get the application uptime in seconds, or None if not started."""
    if _startup_time is None:
        return None
    return int(time.time() - _startup_time)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Startup:
        1. Record startup time
        2. Configure logging
        3. Check required configuration
        4. Initialize database and schema
        5. Initialize LLM provider
        6. Initialize admission queue

    Shutdown:
        1. Close LLM provider
        2. Close database connections

    Raises:
        RuntimeError: ANTHROPIC_API_KEY is not set
    """
    global _llm_provider, _startup_time

    _startup_time = time.time()

    # ===== STARTUP =====
    settings = get_settings()

    configure_logging()

    logger.info(
        "Starting textlens",
        environment=settings.app_env,
        host=settings.host,
        port=settings.port,
    )

    if not settings.anthropic_api_key:
        logger.error("ANTHROPIC_API_KEY is not set")
        raise RuntimeError("ANTHROPIC_API_KEY environment variable is required")

    try:
        await init_database()
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    _llm_provider = AnthropicLLMProvider(
        settings.anthropic_api_key,
        base_url=settings.llm_base_url,
        model=settings.llm_model,
        max_tokens=settings.llm_max_tokens,
        timeout_seconds=settings.llm_timeout_seconds,
    )
    set_llm_provider(_llm_provider)
    logger.info(
        "LLM provider initialized",
        base_url=settings.llm_base_url,
        model=settings.llm_model,
        timeout_ms=settings.llm_timeout_ms,
    )

    set_admission_queue(
        AdmissionQueue(
            max_concurrent=settings.max_concurrent_requests,
            max_queue_size=settings.max_queue_size,
            name="analysis",
        )
    )
    logger.info(
        "Admission queue initialized",
        max_concurrent=settings.max_concurrent_requests,
        max_queue_size=settings.max_queue_size,
    )

    logger.info("textlens startup complete")

    yield  # Application runs here

    # ===== SHUTDOWN =====
    logger.info("Shutting down textlens")

    set_admission_queue(None)
    set_llm_provider(None)

    if _llm_provider:
        try:
            await _llm_provider.close()
            logger.info("LLM provider closed")
        except Exception as e:
            logger.error("Error closing LLM provider", error=str(e))
        _llm_provider = None

    try:
        await close_database()
    except Exception as e:
        logger.error("Error during database shutdown", error=str(e))

    logger.info("textlens shutdown complete")
