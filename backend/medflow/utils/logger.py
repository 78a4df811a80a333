"""Logger module for the project."""

import logging
import pathlib

from medflow.config import get_settings


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name.

    :param name: the name of the logger.
    :return: the logger instance.
    """
    settings = get_settings()
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    logger.propagate = False

    if not logger.hasHandlers():
        formatter = logging.Formatter(
            fmt=("%(asctime)s - %(name)s - %(levelname)s - " + "%(module)s - %(funcName)s - %(message)s"),
            datefmt="%d-%m-%Y %H:%M:%S",
        )

        # Console handler
        ch = logging.StreamHandler()
        ch.setLevel(settings.log_level.upper())
        ch.setFormatter(formatter)
        logger.addHandler(ch)

        if not settings.log_file:
            return logger

        log_path = pathlib.Path(settings.log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_path, mode="a")
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(formatter)
            logger.addHandler(fh)
        except OSError as e:
            logger.warning(f"Could not open log file {log_path}: {e}")

    return logger
