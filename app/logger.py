import logging
import os
from logging.handlers import RotatingFileHandler

# ---------------------------------------------------------------------------
# Logger Setup
# ---------------------------------------------------------------------------
LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "logs"))
LOG_FILE = os.path.join(LOG_DIR, "sake_review.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

FORMAT = "%(asctime)s [%(levelname)s] [%(name)s:%(lineno)d] %(funcName)s(): %(message)s"

_handler = None


def _file_handler():
    global _handler
    if _handler is None:
        os.makedirs(LOG_DIR, exist_ok=True)
        # Rotating file handler (10MB max per file, 5 backups)
        _handler = RotatingFileHandler(
            LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        _handler.setFormatter(logging.Formatter(FORMAT))
    return _handler


def get_logger(name: str) -> logging.Logger:
    """Return a ``sake_review.<name>`` logger writing to the shared rotating file."""
    logger = logging.getLogger(f"sake_review.{name}")
    if not logger.handlers:
        logger.setLevel(LOG_LEVEL)
        logger.addHandler(_file_handler())
    return logger
