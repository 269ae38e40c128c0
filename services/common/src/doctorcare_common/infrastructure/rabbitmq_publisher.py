"""RabbitMQ implementation of the MessagePublisher interface."""

import json
import logging
from collections.abc import Callable

import pika
from pika.adapters.blocking_connection import BlockingConnection

from doctorcare_common.exceptions import QueueError
from doctorcare_common.infrastructure.interfaces import MessagePublisher

logger = logging.getLogger(__name__)


class RabbitMQPublisher(MessagePublisher):
    """
    Publishes persistent messages to a RabbitMQ exchange.

    A short-lived connection is opened per publish because blocking channels
    must not be shared between request threads. Publisher confirms and
    ``mandatory`` make an unroutable or nacked message a QueueError instead of
    a silent drop.
    """

    def __init__(
        self,
        connection_factory: Callable[[], BlockingConnection],
        exchange_name: str,
    ):
        self._connection_factory = connection_factory
        self._exchange_name = exchange_name

    def publish(self, routing_key: str, payload: dict) -> None:
        try:
            connection = self._connection_factory()
            try:
                channel = connection.channel()
                channel.confirm_delivery()
                channel.basic_publish(
                    exchange=self._exchange_name,
                    routing_key=routing_key,
                    body=json.dumps(payload),
                    properties=pika.BasicProperties(
                        content_type="application/json",
                        delivery_mode=pika.DeliveryMode.Persistent,
                    ),
                    mandatory=True,
                )
            finally:
                connection.close()
        except Exception as e:
            logger.exception(
                "RabbitMQ publish failed",
                extra={"exchange": self._exchange_name, "routing_key": routing_key},
            )
            raise QueueError(routing_key, e) from e

        logger.info(
            "Message published to RabbitMQ",
            extra={"exchange": self._exchange_name, "routing_key": routing_key},
        )
