"""Abstract interface for LLM service operations."""

from abc import ABC, abstractmethod

from prescription_worker.domain.models import GeneratedDraft


class LLMService(ABC):
    """Abstract base class for LLM backends."""

    @abstractmethod
    def generate_draft(self, transcript: str) -> GeneratedDraft:
        """
        Drafts a structured prescription from a consultation transcript.

        Args:
            transcript: The transcript text.

        Returns:
            GeneratedDraft with the raw output and the validated draft.

        Raises:
            SummaryServiceError: If the LLM call fails or the output is malformed.
        """
