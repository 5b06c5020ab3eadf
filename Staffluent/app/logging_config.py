import logging
import sys

from pythonjsonlogger.json import JsonFormatter


def setup_logging(level="INFO"):
    """Send structured JSON log lines to stdout."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(
        fmt='%(asctime)s %(levelname)s %(name)s %(message)s'
    ))

    logger = logging.getLogger("Staffluent")
    logger.setLevel(level)
    logger.handlers = [handler]
    # Keep records out of the root logger so they are not printed twice
    logger.propagate = False

    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    return logger
