"""Application entry point for the document ingestion API server."""

import sys
from pathlib import Path

import uvicorn

from docingest.api.app import create_app
from docingest.exceptions import ConfigError, PortUnavailableError
from docingest.utils.config import load_config
from docingest.utils.logger import get_logger, setup_logging
from docingest.utils.ports import find_free_port

logger = get_logger(__name__)


def main(config_path: Path | None = None) -> None:
    """Validate configuration, pick a free port and start the server.

    Exits with status 1, before accepting any connection, if the
    configuration is invalid or no port is available.
    """
    setup_logging()
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    setup_logging(config.log_level)
    logger.info("Configuration loaded; OCR backend is %s", config.ocr.backend)

    try:
        port = find_free_port(
            config.server.port,
            host=config.server.host,
            max_attempts=config.server.max_port_attempts,
        )
    except PortUnavailableError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    logger.info("Starting server on %s:%d", config.server.host, port)
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
