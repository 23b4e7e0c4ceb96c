"""Console logging for the mailqueue package."""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single console handler to the ``mailqueue`` logger."""
    logger = logging.getLogger("mailqueue")
    logger.setLevel(level.upper())
    logger.propagate = False

    # Replace rather than stack handlers; stderr may have been swapped since the last call.
    for old in list(logger.handlers):
        logger.removeHandler(old)

    handler = logging.StreamHandler()
    handler.setLevel(level.upper())
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger
