import logging
import sys


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configures the ``shortener`` logger and returns it."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("shortener")
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)

    return logger
