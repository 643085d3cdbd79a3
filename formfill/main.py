"""Application entry point for the form-fill API server."""

import sys

import uvicorn

from formfill.api.app import app
from formfill.utils.config import ConfigurationError, load_config, resolve_api_key
from formfill.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    """Start the FastAPI application server.

    Exits with status 1 when the gateway API key is not configured.
    """
    config = load_config()
    setup_logging(config.log_level)
    try:
        resolve_api_key(config.gateway)
    except ConfigurationError as exc:
        logger.error("Cannot start server: %s", exc)
        sys.exit(1)
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
