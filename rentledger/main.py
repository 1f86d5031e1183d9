"""Main application entry point."""

import logging

import uvicorn
from dotenv import load_dotenv

from rentledger.api.app import create_app
from rentledger.config import get_app_config
from rentledger.services.logging import setup_server_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Load .env, configure logging and serve the API."""
    load_dotenv()
    config = get_app_config()
    setup_server_logging(config.log_file)

    logger.info("Starting ledger server on %s:%d", config.host, config.port)
    uvicorn.run(create_app(), host=config.host, port=config.port, log_level="info")


if __name__ == "__main__":
    main()
