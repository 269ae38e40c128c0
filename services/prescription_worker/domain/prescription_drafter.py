"""Core business logic for drafting prescriptions from transcripts."""

import logging
from uuid import UUID

from prescription_worker.domain.models import GeneratedDraft
from prescription_worker.exceptions import CacheServiceError
from prescription_worker.infrastructure.interfaces import CacheService, LLMService

logger = logging.getLogger(__name__)


class PrescriptionDrafter:
    """Asks the LLM for a prescription draft, caching the result per recording."""

    def __init__(self, llm_service: LLMService, cache_service: CacheService):
        self._llm = llm_service
        self._cache = cache_service

    def draft(self, transcript: str, recording_id: UUID) -> GeneratedDraft:
        """
        Drafts a prescription, reusing a cached draft when a job is redelivered.

        A cache outage degrades to calling the LLM directly.

        Args:
            transcript: The formatted consultation transcript.
            recording_id: Recording identifier used as the cache key.

        Returns:
            GeneratedDraft with the raw output and the validated draft.

        Raises:
            SummaryServiceError: If the LLM fails or its output does not validate.
        """
        cache_key = f"draft:{recording_id}"

        cached = self._cache_get(cache_key)
        if cached:
            logger.info(
                "Draft retrieved from cache", extra={"recording_id": str(recording_id)}
            )
            return GeneratedDraft.model_validate_json(cached)

        generated = self._llm.generate_draft(transcript)

        try:
            self._cache.set(cache_key, generated.model_dump_json())
            logger.info("Draft cached", extra={"recording_id": str(recording_id)})
        except CacheServiceError:
            logger.warning(
                "Draft not cached", extra={"recording_id": str(recording_id)}
            )

        return generated

    def _cache_get(self, key: str) -> str | None:
        try:
            return self._cache.get(key)
        except CacheServiceError:
            logger.warning("Cache unavailable, calling LLM", extra={"key": key})
            return None
