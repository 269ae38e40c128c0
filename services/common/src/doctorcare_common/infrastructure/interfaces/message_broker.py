"""Abstract interfaces for message broker operations."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any


class MessagePublisher(ABC):
    """Abstract base class for publishing messages to a broker."""

    @abstractmethod
    def publish(self, routing_key: str, payload: dict) -> None:
        """
        Publishes a message to the broker.

        Args:
            routing_key: The routing key for message routing.
            payload: The message data as a dictionary.

        Raises:
            QueueError: If publishing fails or the message is unroutable.
        """


class MessageBroker(MessagePublisher, ABC):
    """Abstract base class for full message broker operations (publish + consume)."""

    @abstractmethod
    def acknowledge(self, delivery_tag: int) -> None:
        """
        Acknowledges successful processing of a message.

        Args:
            delivery_tag: The message delivery tag.
        """

    @abstractmethod
    def reject(self, delivery_tag: int) -> None:
        """
        Rejects a message and returns it to the queue for redelivery.

        Args:
            delivery_tag: The message delivery tag.
        """

    @abstractmethod
    def dead_letter(self, delivery_tag: int) -> None:
        """
        Rejects a message without requeueing, routing it to the dead-letter queue.

        Args:
            delivery_tag: The message delivery tag.
        """

    @abstractmethod
    def retry_later(self, body: bytes, retry_count: int, delay_seconds: int) -> None:
        """
        Schedules a copy of a message for redelivery after a delay.

        The caller acknowledges the original once this returns.

        Args:
            body: The original message body.
            retry_count: Number of retries scheduled so far, including this one.
            delay_seconds: How long the copy waits before returning to the work queue.

        Raises:
            QueueError: If the copy cannot be published.
        """

    @abstractmethod
    def consume(
        self, callback: Callable[[bytes, int, dict[str, Any] | None], None]
    ) -> None:
        """
        Starts consuming messages from the configured queue.

        Args:
            callback: Function called for each message with (body, delivery_tag, headers).
        """

    @abstractmethod
    def setup(self) -> None:
        """Sets up the required infrastructure (exchanges, queues, bindings)."""
