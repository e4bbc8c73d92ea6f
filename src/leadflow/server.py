from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from leadflow.api.app import create_app
from leadflow.utils.config import Config, get_config
from leadflow.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def create_server(config: Config | None = None) -> FastAPI:
    """Build and return the configured API application."""
    config = config or get_config()
    setup_logging(config.log_level)
    return create_app(config)


def run(config: Config | None = None) -> None:
    config = config or get_config()
    app = create_server(config)
    logger.info("Starting Leadflow on %s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    run()
