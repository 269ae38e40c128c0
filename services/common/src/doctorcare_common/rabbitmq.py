import logging

import pika

from doctorcare_common.config import QueueConfig, RabbitMQConfig

logger = logging.getLogger(__name__)

# retries already scheduled through a delay queue; x-delivery-count resets on republish
RETRY_COUNT_HEADER = "x-retry-count"


def retry_queue_name(queue_config: QueueConfig, delay_seconds: int) -> str:
    """Name of the holding queue that delays a retry by ``delay_seconds``."""
    return f"{queue_config.name}.retry.{delay_seconds}s"


def get_connection_parameters(config: RabbitMQConfig) -> pika.ConnectionParameters:
    """Builds pika connection parameters with bounded socket timeouts."""
    credentials = pika.PlainCredentials(config.user, config.password)
    return pika.ConnectionParameters(
        host=config.host,
        credentials=credentials,
        heartbeat=0,
        socket_timeout=config.socket_timeout_seconds,
        stack_timeout=config.socket_timeout_seconds,
        blocked_connection_timeout=config.blocked_connection_timeout_seconds,
    )


def get_rabbit_channel(config: RabbitMQConfig):
    """
    Establishes a new blocking connection to RabbitMQ and returns a channel.

    Returns:
        tuple: (connection, channel)
    """
    try:
        connection = pika.BlockingConnection(get_connection_parameters(config))
        channel = connection.channel()
        return connection, channel
    except Exception:
        logger.exception(
            "Failed to connect to RabbitMQ",
            extra={"host": config.host, "username": config.user},
        )
        raise


def declare_queue_infrastructure(channel, config: RabbitMQConfig) -> None:
    """
    Declares the dead-letter exchange, main exchange, work queue, retry
    delay queues and bindings.

    Every declaration is idempotent, so both the publisher and the consumer
    call this on startup.
    """
    queue_config = config.queue_config

    channel.exchange_declare(
        exchange=queue_config.dlq_exchange_name,
        exchange_type="direct",
        durable=True,
    )
    channel.queue_declare(queue=queue_config.dlq_name, durable=True)
    channel.queue_bind(
        queue=queue_config.dlq_name,
        exchange=queue_config.dlq_exchange_name,
        routing_key=queue_config.dlq_routing_key,
    )

    channel.exchange_declare(
        exchange=config.exchange_name,
        exchange_type="topic",
        durable=True,
    )

    queue_args = {
        "x-queue-type": queue_config.queue_type,
        "x-delivery-limit": queue_config.max_delivery_count,
        "x-dead-letter-exchange": queue_config.dlq_exchange_name,
        "x-dead-letter-routing-key": queue_config.dlq_routing_key,
    }
    channel.queue_declare(
        queue=queue_config.name,
        durable=True,
        arguments=queue_args,
    )
    channel.queue_bind(
        queue=queue_config.name,
        exchange=config.exchange_name,
        routing_key=queue_config.expected_routing_key,
    )

    # holding queues: messages expire after the delay and dead-letter back to the work queue
    for delay_seconds in sorted(set(queue_config.retry_delays_seconds)):
        channel.queue_declare(
            queue=retry_queue_name(queue_config, delay_seconds),
            durable=True,
            arguments={
                "x-message-ttl": delay_seconds * 1000,
                "x-dead-letter-exchange": config.exchange_name,
                "x-dead-letter-routing-key": queue_config.expected_routing_key,
            },
        )

    logger.info(
        "RabbitMQ infrastructure setup complete",
        extra={"queue": queue_config.name, "exchange": config.exchange_name},
    )
