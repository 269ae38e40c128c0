from doctorcare_common.infrastructure.interfaces.key_service import DataKey, KeyService
from doctorcare_common.infrastructure.interfaces.message_broker import (
    MessageBroker,
    MessagePublisher,
)
from doctorcare_common.infrastructure.interfaces.storage import StorageClient

__all__ = [
    "DataKey",
    "KeyService",
    "StorageClient",
    "MessagePublisher",
    "MessageBroker",
]
