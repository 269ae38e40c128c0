"""Infrastructure interface exports."""

from .cache_service import CacheService
from .llm_service import LLMService
from .transcription_service import TranscriptionService

__all__ = ["CacheService", "LLMService", "TranscriptionService"]
