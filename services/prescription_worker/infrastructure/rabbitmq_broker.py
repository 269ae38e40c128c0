"""RabbitMQ implementation of the MessageBroker interface."""

import json
import logging
from collections.abc import Callable
from typing import Any

import pika
from doctorcare_common import QueueError, RabbitMQConfig
from doctorcare_common.infrastructure.interfaces import MessageBroker
from doctorcare_common.rabbitmq import (
    RETRY_COUNT_HEADER,
    declare_queue_infrastructure,
    retry_queue_name,
)
from pika.adapters.blocking_connection import BlockingChannel

logger = logging.getLogger(__name__)


class RabbitMQBroker(MessageBroker):
    """Handles message broker operations using RabbitMQ."""

    def __init__(self, channel: BlockingChannel, config: RabbitMQConfig):
        self._channel = channel
        self._config = config

    def publish(self, routing_key: str, payload: dict) -> None:
        try:
            self._channel.basic_publish(
                exchange=self._config.exchange_name,
                routing_key=routing_key,
                body=json.dumps(payload),
                properties=pika.BasicProperties(
                    content_type="application/json",
                    delivery_mode=pika.DeliveryMode.Persistent,
                ),
            )
            logger.info(
                "Event published to RabbitMQ",
                extra={
                    "exchange": self._config.exchange_name,
                    "routing_key": routing_key,
                },
            )
        except Exception as e:
            logger.exception(
                "RabbitMQ publish failed",
                extra={"routing_key": routing_key},
            )
            raise QueueError(routing_key, e) from e

    def acknowledge(self, delivery_tag: int) -> None:
        self._channel.basic_ack(delivery_tag=delivery_tag)

    def reject(self, delivery_tag: int) -> None:
        self._channel.basic_nack(delivery_tag=delivery_tag, requeue=True)

    def dead_letter(self, delivery_tag: int) -> None:
        self._channel.basic_nack(delivery_tag=delivery_tag, requeue=False)

    def retry_later(self, body: bytes, retry_count: int, delay_seconds: int) -> None:
        queue_name = retry_queue_name(self._config.queue_config, delay_seconds)
        try:
            # default exchange routes straight to the holding queue by name
            self._channel.basic_publish(
                exchange="",
                routing_key=queue_name,
                body=body,
                properties=pika.BasicProperties(
                    content_type="application/json",
                    delivery_mode=pika.DeliveryMode.Persistent,
                    headers={RETRY_COUNT_HEADER: retry_count},
                ),
            )
        except Exception as e:
            logger.exception("Retry scheduling failed", extra={"queue": queue_name})
            raise QueueError(queue_name, e) from e

        logger.info(
            "Retry scheduled",
            extra={
                "queue": queue_name,
                "retry_count": retry_count,
                "delay_seconds": delay_seconds,
            },
        )

    def consume(
        self, callback: Callable[[bytes, int, dict[str, Any] | None], None]
    ) -> None:
        def on_message(ch, method, properties, body):
            headers = properties.headers if properties else None
            callback(body, method.delivery_tag, headers)

        self._channel.basic_qos(prefetch_count=1)
        self._channel.basic_consume(
            queue=self._config.queue_config.name,
            on_message_callback=on_message,
        )
        logger.info(
            "Message consumption started",
            extra={"queue": self._config.queue_config.name},
        )
        self._channel.start_consuming()

    def setup(self) -> None:
        """Sets up dead-letter exchange, main exchange, queue, and bindings."""
        declare_queue_infrastructure(self._channel, self._config)
