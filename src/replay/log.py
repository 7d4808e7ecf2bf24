"""Logging setup for the replay engine."""

import logging

from src.replay.config import ReplayConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(config: ReplayConfig) -> None:
    """
    Configure root logging from the replay configuration.

    Args:
        config: Configuration providing log_level and debug flag

    """
    level = logging.DEBUG if config.debug else getattr(logging, config.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # httpx logs every request at INFO
    http_level = level if config.debug else max(level, logging.WARNING)
    logging.getLogger("httpx").setLevel(http_level)
