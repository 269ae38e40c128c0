"""Formats speech-to-text output for the summarization prompt."""

from .models import Transcript


class TranscriptBuilder:
    """Builds readable transcripts from speaker-labeled utterances."""

    def build(self, transcript: Transcript) -> str:
        """
        Formats a transcript as one ``Speaker X: text`` line per utterance.

        Falls back to the plain text when the service returned no speaker labels.
        """
        if not transcript.utterances:
            return transcript.text.strip()
        return "\n".join(f"Speaker {u.speaker}: {u.text}" for u in transcript.utterances)
