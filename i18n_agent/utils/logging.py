"""Logging setup for the service and its helper scripts."""

import logging
import os
import sys

from pydantic import BaseModel, Field

# Libraries that log every request at INFO
NOISY_LOGGERS = ("anthropic", "httpx", "httpcore", "uvicorn.access")


class LogConfig(BaseModel):
    """Root logger settings, read from LOG_LEVEL by default."""

    level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    format: str = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    quiet_loggers: tuple[str, ...] = NOISY_LOGGERS


def setup_logging(config: LogConfig | None = None) -> None:
    """Route all records to stdout at the configured level."""
    config = config or LogConfig()

    logging.basicConfig(
        level=config.level.upper(),
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,
    )

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Module logger; pass ``level`` to override the inherited root level."""
    logger = logging.getLogger(name)
    if level:
        logger.setLevel(level.upper())
    return logger
