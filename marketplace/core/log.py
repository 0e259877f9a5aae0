"""
Logging setup shared by the API process and the gunicorn workers
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send all marketplace loggers to stdout at the given level."""
    root = logging.getLogger("marketplace")
    root.setLevel(level.upper())

    if not any(getattr(h, "_marketplace", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._marketplace = True
        root.addHandler(handler)

    # SQL echo is controlled by DEBUG on the engine
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
