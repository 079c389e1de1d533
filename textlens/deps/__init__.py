"""Dependency injection modules for textlens."""

from textlens.deps.db import DBSession, get_db
from textlens.deps.services import (
    AdmissionQueueDep,
    AnalysisServiceDep,
    LLMProviderDep,
    SearchServiceDep,
    StorageServiceDep,
    get_admission_queue,
    get_admission_queue_optional,
    get_analysis_service,
    get_llm_provider,
    get_llm_provider_optional,
    get_search_service,
    get_storage_service,
    set_admission_queue,
    set_llm_provider,
)

__all__ = [
    # Database
    "DBSession",
    "get_db",
    # LLM provider
    "get_llm_provider",
    "get_llm_provider_optional",
    "set_llm_provider",
    "LLMProviderDep",
    # Admission queue
    "get_admission_queue",
    "get_admission_queue_optional",
    "set_admission_queue",
    "AdmissionQueueDep",
    # Service dependencies
    "get_analysis_service",
    "get_storage_service",
    "get_search_service",
    # Type aliases
    "AnalysisServiceDep",
    "StorageServiceDep",
    "SearchServiceDep",
]
