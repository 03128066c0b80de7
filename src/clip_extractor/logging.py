import logging
import os
import sys

from pythonjsonlogger.json import JsonFormatter

# Loggers that install their own handlers and would otherwise log plain text
SERVER_LOGGERS = ["uvicorn", "uvicorn.access", "uvicorn.error", "ddtrace"]


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configures structured JSON logging on stdout.

    Every record carries timestamp, level, logger name, message and the
    Datadog trace_id/span_id, plus whatever the caller passed in ``extra``.
    The root logger and the server loggers share one handler so request
    logs and pipeline logs come out in the same format.

    Args:
        level: Log level name. Defaults to $LOG_LEVEL, then INFO.

    Returns:
        logging.Logger: The configured root logger instance.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
    )
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [stream_handler]

    for logger_name in SERVER_LOGGERS:
        server_logger = logging.getLogger(logger_name)
        server_logger.setLevel(level)
        server_logger.handlers = [stream_handler]
        server_logger.propagate = False

    return root_logger
