"""Infrastructure layer exports."""

from .assemblyai_transcriber import AssemblyAITranscriber
from .gemini_llm import GeminiLLMService
from .rabbitmq_broker import RabbitMQBroker
from .redis_cache import RedisCacheService

__all__ = [
    "AssemblyAITranscriber",
    "GeminiLLMService",
    "RabbitMQBroker",
    "RedisCacheService",
]
