import logging
import sys

from pythonjsonlogger.json import JsonFormatter


def setup_logging(level: int = logging.INFO):
    """
    Configures structured JSON logging for a service process.

    Installs a JSON formatter that includes timestamp, level, logger name,
    message, trace_id and span_id, and routes the root logger and the Uvicorn
    loggers through a single stdout handler so every line has the same shape.

    Returns:
        logging.Logger: The configured root logger instance.
    """
    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
    )
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []
    root_logger.addHandler(stream_handler)

    for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        u_logger = logging.getLogger(logger_name)
        u_logger.setLevel(level)
        u_logger.handlers = []
        u_logger.addHandler(stream_handler)
        u_logger.propagate = False

    # botocore logs request bodies at DEBUG, which would include key material
    logging.getLogger("botocore").setLevel(logging.WARNING)

    return root_logger
