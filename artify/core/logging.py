"""
Logging setup shared by every module of the API.
"""
import logging

from artify.core.config import config

logger = logging.getLogger('artify')
logger.setLevel(config.LOG_LEVEL)

# Add handler if not already configured
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return a child of the application logger, e.g. ``artify.lifecycle``."""
    return logger.getChild(name)
