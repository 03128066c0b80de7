"""
Clip Extractor Service.

Entry point for the HTTP service. It handles:
- Structured JSON logging.
- Distributed tracing with Datadog.
- Serving the FastAPI app with uvicorn until SIGINT/SIGTERM.
"""

import uvicorn
from ddtrace import patch

from clip_extractor.app import create_app
from clip_extractor.dependencies import get_config
from clip_extractor.logging import setup_logging

logger = setup_logging()


def main():
    """Starts the HTTP server."""
    patch(fastapi=True, urllib3=True)
    config = get_config()
    logger.info(
        "Starting server",
        extra={
            "port": config.server.port,
            "idle_timeout": config.server.idle_timeout,
            "request_timeout": config.server.request_timeout,
            "storage_backend": config.storage_backend,
        },
    )
    uvicorn.run(
        create_app(),
        host=config.server.host,
        port=config.server.port,
        timeout_keep_alive=int(config.server.idle_timeout),
        timeout_graceful_shutdown=int(config.server.shutdown_timeout),
        log_config=None,
    )
    logger.info("Shutting down")


if __name__ == "__main__":
    main()
