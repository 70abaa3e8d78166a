import logging
import os
from logging.handlers import RotatingFileHandler

from app.platform.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "waitlist.log"
ROOT_LOGGER_NAME = "app"


def get_logger(name: str):
    """
    Module loggers hang under the ``app`` logger, whose handlers and level are
    set by :func:`configure_logging` when the application is created.
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Points the ``app`` logger at the console AND a rotating file under
    ``settings.LOG_DIR``. Calling it again replaces the previous handlers.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    log_dir = os.path.join(os.getcwd(), settings.LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)

    # Rotating file handler
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME), maxBytes=10_000_000, backupCount=5
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    # Console
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger
