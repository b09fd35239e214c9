"""Process entry point: configuration, logging, HTTP server."""

import sys

import uvicorn
from loguru import logger

from ewallet_ums.api.http.app import create_app
from ewallet_ums.api.utils.app_startup import configure_logging
from ewallet_ums.core.errors import ConfigurationError
from ewallet_ums.runtime.context import get_config
from ewallet_ums.runtime.environment import setup_environment


def build_server() -> uvicorn.Server:
    config = get_config()
    app = create_app(config)
    server_config = uvicorn.Config(
        app,
        host=config.app.host,
        port=config.app.port,
        lifespan="on",
        # Request logs come from the HTTP middleware
        access_log=False,
        log_config=None,
        timeout_graceful_shutdown=int(config.app.shutdown_timeout),
    )
    return uvicorn.Server(server_config)


def run() -> None:
    """Serve until SIGINT/SIGTERM; exit with status 1 if startup fails."""
    try:
        setup_environment()
        configure_logging()
        server = build_server()
    except ConfigurationError as e:
        logger.critical("Invalid configuration: {}", e)
        sys.exit(1)

    config = get_config()
    logger.info(
        "Starting server on {}:{} ({} environment)",
        config.app.host,
        config.app.port,
        config.app.environment,
    )
    server.run()

    if not server.started:
        logger.critical("Server failed to start")
        sys.exit(1)

    logger.info("Server exited properly")


if __name__ == "__main__":
    run()
