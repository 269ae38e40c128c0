"""Gemini LLM service implementation."""

import logging

from google import genai
from pydantic import ValidationError

from prescription_worker.domain.models import GeneratedDraft, PrescriptionDraft
from prescription_worker.exceptions import SummaryServiceError
from prescription_worker.infrastructure.interfaces import LLMService

logger = logging.getLogger(__name__)


class GeminiLLMService(LLMService):
    """LLM service implementation using Google Gemini."""

    def __init__(self, client: genai.Client, model_name: str, system_prompt: str):
        self._client = client
        self._model_name = model_name
        self._system_prompt = system_prompt

    def generate_draft(self, transcript: str) -> GeneratedDraft:
        """
        Drafts a prescription with Gemini using a JSON response schema.

        Output that does not validate against PrescriptionDraft is rejected
        rather than stored.

        Raises:
            SummaryServiceError: If the Gemini call fails or the output is malformed.
        """
        try:
            response = self._client.models.generate_content(
                model=self._model_name,
                contents=transcript,
                config={
                    "response_mime_type": "application/json",
                    "response_schema": PrescriptionDraft,
                    "system_instruction": self._system_prompt,
                    "temperature": 0.0,
                },
            )
        except Exception as e:
            logger.exception("Gemini API call failed")
            raise SummaryServiceError(f"Gemini draft failed: {e}", cause=e) from e

        if not response.text:
            raise SummaryServiceError("Gemini returned empty response")

        try:
            draft = PrescriptionDraft.model_validate_json(response.text)
        except ValidationError as e:
            logger.error(
                "Gemini returned a malformed draft",
                extra={"error_count": e.error_count()},
            )
            raise SummaryServiceError("Gemini returned a malformed draft", cause=e) from e

        logger.info("LLM draft completed", extra={"medicines": len(draft.medicines)})
        return GeneratedDraft(raw_text=response.text, draft=draft)
