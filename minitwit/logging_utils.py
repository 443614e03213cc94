"""Logging setup for the minitwit package."""
import logging

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def configure_logging(level='INFO'):
    """Attach a single stream handler to the ``minitwit`` logger."""
    logger = logging.getLogger('minitwit')
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
